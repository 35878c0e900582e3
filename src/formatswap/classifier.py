"""Map raised failures to user-facing error info."""

from dataclasses import replace

from formatswap.errors import (
    ConversionError,
    ErrorCategory,
    ErrorInfo,
    FormatSwapError,
    UnsupportedConversionError,
)

_INVALID_JSON = ErrorInfo(
    category=ErrorCategory.VALIDATION,
    message="Invalid JSON format detected.",
    suggestion=(
        "Please check your JSON file for syntax errors like missing commas, "
        "quotes, or brackets."
    ),
    can_retry=True,
)

_INVALID_XML = ErrorInfo(
    category=ErrorCategory.VALIDATION,
    message="Invalid XML format detected.",
    suggestion="Please ensure your XML file is well-formed with proper tags and structure.",
    can_retry=True,
)

_INVALID_CSV = ErrorInfo(
    category=ErrorCategory.VALIDATION,
    message="Invalid CSV format detected.",
    suggestion="Please check your CSV file for proper comma separation and consistent columns.",
    can_retry=True,
)

_EMPTY_OUTPUT = ErrorInfo(
    category=ErrorCategory.CONVERSION,
    message="Conversion resulted in an empty file.",
    suggestion=(
        "The input file may be corrupted or in an unsupported format. "
        "Try a different file."
    ),
    can_retry=True,
)

_UNSUPPORTED = ErrorInfo(
    category=ErrorCategory.CONVERSION,
    message="Conversion format not supported.",
    suggestion=(
        "This conversion combination is not currently supported. "
        "Try a different output format."
    ),
    can_retry=False,
)

_MEMORY = ErrorInfo(
    category=ErrorCategory.MEMORY,
    message="Insufficient memory for conversion.",
    suggestion="The file is too large. Try with a smaller file or different format.",
    can_retry=False,
)

_NETWORK = ErrorInfo(
    category=ErrorCategory.NETWORK,
    message="Network error occurred.",
    suggestion="Please check your internet connection and try again.",
    can_retry=True,
)

_ENGINE_UNAVAILABLE = ErrorInfo(
    category=ErrorCategory.CONVERSION,
    message="The media codec engine could not be loaded.",
    suggestion="Make sure FFmpeg is installed and on your PATH, then try again.",
    can_retry=True,
)

_UNKNOWN_SUGGESTION = (
    "Please try again. If the problem persists, try a different file or format."
)

# Structured error kinds
_CATALOG: dict[str, ErrorInfo] = {
    "invalid_json": _INVALID_JSON,
    "invalid_xml": _INVALID_XML,
    "invalid_csv": _INVALID_CSV,
    "empty_output": _EMPTY_OUTPUT,
    "unsupported": _UNSUPPORTED,
    "engine_unavailable": _ENGINE_UNAVAILABLE,
}

# Substring fallback for errors from libraries we do not control; order matters
_MESSAGE_RULES: list[tuple[tuple[str, ...], ErrorInfo]] = [
    (("JSON", "invalid JSON"), _INVALID_JSON),
    (("XML", "malformed XML"), _INVALID_XML),
    (("CSV", "malformed CSV"), _INVALID_CSV),
    (("empty", "size === 0"), _EMPTY_OUTPUT),
    (("not supported", "unsupported"), _UNSUPPORTED),
    (("memory", "out of memory"), _MEMORY),
    (("network", "fetch"), _NETWORK),
]


def classify_error(error: BaseException | str) -> ErrorInfo:
    """Classify a failure into one of the fixed error categories.

    Errors raised by this package carry an explicit category and kind and
    are looked up directly. Anything else (errors from third-party
    decoders and writers) is classified by matching substrings of its
    message.

    Args:
        error: The raised exception, or a bare message.

    Returns:
        ErrorInfo with message, suggestion and retry flag.
    """
    if isinstance(error, ConversionError):
        return error.info

    if isinstance(error, MemoryError):
        return _MEMORY

    message = str(error)

    if isinstance(error, FormatSwapError):
        info = _CATALOG.get(error.kind)
        if info is not None:
            # Name the rejected pair
            if isinstance(error, UnsupportedConversionError):
                return replace(info, message=message)
            return info
        if error.category is not ErrorCategory.UNKNOWN:
            return ErrorInfo(
                category=error.category,
                message=message or "Conversion failed.",
                suggestion=_UNKNOWN_SUGGESTION,
                can_retry=True,
            )

    for needles, info in _MESSAGE_RULES:
        if any(needle in message for needle in needles):
            return info

    return ErrorInfo(
        category=ErrorCategory.UNKNOWN,
        message=message or "An unexpected error occurred.",
        suggestion=_UNKNOWN_SUGGESTION,
        can_retry=True,
    )
