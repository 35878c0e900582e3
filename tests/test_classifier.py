"""Tests for error classification."""

import pytest

from formatswap.classifier import classify_error
from formatswap.errors import (
    CodecEngineUnavailableError,
    CodecError,
    ConversionError,
    ConversionFailedError,
    EmptyOutputError,
    ErrorCategory,
    ErrorInfo,
    InvalidInputError,
    UnsupportedConversionError,
)


class TestStructuredErrors:
    @pytest.mark.parametrize("kind,message", [
        ("invalid_json", "Invalid JSON format detected."),
        ("invalid_xml", "Invalid XML format detected."),
        ("invalid_csv", "Invalid CSV format detected."),
    ])
    def test_invalid_input(self, kind, message):
        info = classify_error(InvalidInputError("bad input", kind=kind))

        assert info.category is ErrorCategory.VALIDATION
        assert info.message == message
        assert info.can_retry is True

    def test_unsupported_is_not_retryable(self):
        info = classify_error(UnsupportedConversionError("MD", "PDF"))

        assert info.category is ErrorCategory.CONVERSION
        assert info.message == "Conversion from MD to PDF is not supported."
        assert info.suggestion == (
            "This conversion combination is not currently supported. "
            "Try a different output format."
        )
        assert info.can_retry is False

    def test_unsupported_message_without_pair(self):
        info = classify_error(RuntimeError("format not supported here"))

        assert info.category is ErrorCategory.CONVERSION
        assert info.message == "Conversion format not supported."
        assert info.can_retry is False

    def test_empty_output(self):
        info = classify_error(EmptyOutputError())

        assert info.category is ErrorCategory.CONVERSION
        assert info.message == "Conversion resulted in an empty file."

    def test_engine_unavailable(self):
        info = classify_error(CodecEngineUnavailableError("not found"))

        assert info.category is ErrorCategory.CONVERSION
        assert "FFmpeg" in info.suggestion
        assert info.can_retry is True

    def test_other_package_errors_keep_their_message(self):
        info = classify_error(CodecError("MP3"))

        assert info.category is ErrorCategory.CONVERSION
        assert info.message == "Failed to convert media to MP3."
        assert info.can_retry is True

    def test_failed_step(self):
        info = classify_error(ConversionFailedError("Failed to load image"))

        assert info.category is ErrorCategory.CONVERSION
        assert info.message == "Failed to load image"

    def test_classified_error_passes_through(self):
        original = ErrorInfo(ErrorCategory.NETWORK, "m", "s", True)
        assert classify_error(ConversionError(original)) is original

    def test_memory_error(self):
        info = classify_error(MemoryError())

        assert info.category is ErrorCategory.MEMORY
        assert info.can_retry is False


class TestMessageHeuristics:
    @pytest.mark.parametrize("message,category", [
        ("Unexpected token < in JSON at position 0", ErrorCategory.VALIDATION),
        ("malformed XML document", ErrorCategory.VALIDATION),
        ("CSV row has too many fields", ErrorCategory.VALIDATION),
        ("output was empty", ErrorCategory.CONVERSION),
        ("codec not supported", ErrorCategory.CONVERSION),
        ("ran out of memory while decoding", ErrorCategory.MEMORY),
        ("network unreachable", ErrorCategory.NETWORK),
        ("Failed to fetch", ErrorCategory.NETWORK),
    ])
    def test_substring_rules(self, message, category):
        assert classify_error(RuntimeError(message)).category is category

    def test_rules_apply_in_order(self):
        info = classify_error(ValueError("JSON document was empty"))
        assert info.message == "Invalid JSON format detected."

    def test_matching_is_case_sensitive(self):
        assert classify_error(RuntimeError("bad json")).category is ErrorCategory.UNKNOWN

    def test_bare_message(self):
        assert classify_error("Unsupported codec").category is ErrorCategory.UNKNOWN
        assert classify_error("unsupported codec").category is ErrorCategory.CONVERSION


class TestUnknown:
    def test_keeps_original_message(self):
        info = classify_error(RuntimeError("something odd"))

        assert info.category is ErrorCategory.UNKNOWN
        assert info.message == "something odd"
        assert info.can_retry is True

    def test_empty_message_gets_default(self):
        assert classify_error(RuntimeError()).message == "An unexpected error occurred."


class TestErrorInfo:
    def test_display_text(self):
        info = ErrorInfo(ErrorCategory.MEMORY, "Too big.", "Try smaller.", False)
        assert info.display_text == "Too big. Try smaller."

    def test_is_immutable(self):
        info = ErrorInfo(ErrorCategory.MEMORY, "m", "s", False)
        with pytest.raises(AttributeError):
            info.message = "changed"
