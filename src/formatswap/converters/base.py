"""Converter contract: result payload, context and text helpers."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from formatswap.engine import CodecEngineHandle
from formatswap.formats import mime_type_for

ProgressCallback = Callable[[int], None]

_SURROGATE = re.compile(r"[\ud800-\udfff]")


@dataclass
class ConversionResult:
    """Converted payload tagged with its MIME type."""

    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def text(self) -> str:
        """Decode the payload as UTF-8 text."""
        return self.data.decode("utf-8")


@dataclass
class ConversionContext:
    """Per-call services handed to every converter.

    Converters that can measure their own progress call report(); the
    others ignore it.
    """

    on_progress: ProgressCallback | None = None
    engine: CodecEngineHandle = field(default_factory=CodecEngineHandle)

    def report(self, percent: int) -> None:
        if self.on_progress is not None:
            self.on_progress(percent)


Converter = Callable[[bytes, ConversionContext], ConversionResult]


def decode_text(payload: bytes) -> str:
    """Decode an input payload as UTF-8, dropping a BOM and replacing bad bytes."""
    return payload.decode("utf-8-sig", errors="replace")


def replace_surrogates(text: str) -> str:
    """Replace lone surrogates (legal in JSON escapes) with U+FFFD."""
    return _SURROGATE.sub("\ufffd", text)


def text_result(text: str, target: str, mime_type: str | None = None) -> ConversionResult:
    """Wrap output text in a result tagged with the target's MIME type."""
    return ConversionResult(
        data=replace_surrogates(text).encode("utf-8"),
        mime_type=mime_type or mime_type_for(target),
    )


def clean_markdown(markdown: str) -> str:
    """Collapse runs of blank lines and trim the output."""
    lines = markdown.split("\n")
    cleaned_lines: list[str] = []
    prev_blank = False

    for line in lines:
        is_blank = not line.strip()
        if is_blank and prev_blank:
            continue
        cleaned_lines.append(line)
        prev_blank = is_blank

    return "\n".join(cleaned_lines).strip()
