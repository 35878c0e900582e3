"""Exception hierarchy and error info shape."""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Fixed set of user-facing error categories."""

    VALIDATION = "validation"
    CONVERSION = "conversion"
    MEMORY = "memory"
    NETWORK = "network"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorInfo:
    """Classified failure as shown to the user."""

    category: ErrorCategory
    message: str
    suggestion: str
    can_retry: bool

    @property
    def display_text(self) -> str:
        """Message and suggestion joined for display."""
        return f"{self.message} {self.suggestion}"


class FormatSwapError(Exception):
    """Base class for errors raised by converters and the engine."""

    category = ErrorCategory.UNKNOWN
    kind = "unknown"


class InvalidInputError(FormatSwapError):
    """Input payload is not valid for its declared structured format."""

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, kind: str = "invalid_json"):
        super().__init__(message)
        self.kind = kind


class UnsupportedConversionError(FormatSwapError):
    """No converter is registered for the requested format pair."""

    category = ErrorCategory.CONVERSION
    kind = "unsupported"

    def __init__(self, source: str, target: str):
        super().__init__(
            f"Conversion from {source} to {target} is not supported."
        )
        self.source = source
        self.target = target


class EmptyOutputError(FormatSwapError):
    """A converter finished but produced a zero-length payload."""

    category = ErrorCategory.CONVERSION
    kind = "empty_output"

    def __init__(self, message: str = "Conversion failed: the output file is empty."):
        super().__init__(message)


class ConversionFailedError(FormatSwapError):
    """A pipeline step (decode, encode, render) failed."""

    category = ErrorCategory.CONVERSION
    kind = "failed"


class CodecError(ConversionFailedError):
    """The codec engine could not re-encode the input."""

    kind = "codec_failed"

    def __init__(self, target: str):
        super().__init__(f"Failed to convert media to {target}.")
        self.target = target


class CodecEngineUnavailableError(ConversionFailedError):
    """The codec engine could not be loaded."""

    kind = "engine_unavailable"


class ConversionError(FormatSwapError):
    """The only error raised across the public conversion boundary."""

    def __init__(self, info: ErrorInfo):
        super().__init__(info.message)
        self.info = info
        self.category = info.category
        self.kind = "classified"

    @property
    def can_retry(self) -> bool:
        return self.info.can_retry
