"""FormatSwap - convert files between text, data, document, image and media formats."""

from formatswap.classifier import classify_error
from formatswap.converters.base import ConversionResult
from formatswap.errors import ConversionError, ErrorCategory, ErrorInfo
from formatswap.formats import canonicalize
from formatswap.orchestrator import (
    ConversionService,
    list_compatible_targets,
    request_conversion,
)

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "ConversionResult",
    "ConversionService",
    "ErrorCategory",
    "ErrorInfo",
    "canonicalize",
    "classify_error",
    "list_compatible_targets",
    "request_conversion",
]
