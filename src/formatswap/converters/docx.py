"""DOCX reading using mammoth, with markdownify for Markdown output."""

import io

from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    clean_markdown,
    text_result,
)
from formatswap.converters.documents import markup_to_text, render_pdf
from formatswap.errors import ConversionFailedError
from formatswap.formats import mime_type_for


def docx_to_markup(payload: bytes) -> str:
    """Convert DOCX bytes to an HTML fragment with mammoth.

    Args:
        payload: DOCX file bytes.

    Returns:
        HTML markup for the document body.
    """
    try:
        import mammoth
    except ImportError as e:
        raise ConversionFailedError("mammoth is not installed. Run: pip install mammoth") from e

    try:
        result = mammoth.convert_to_html(io.BytesIO(payload))
    except Exception as e:
        raise ConversionFailedError(f"Failed to read DOCX document: {e}") from e

    return result.value


# --- Converters ---


def docx_to_html(payload: bytes, context: ConversionContext) -> ConversionResult:
    markup = docx_to_markup(payload)
    return text_result(f"<html><body>{markup}</body></html>", "HTML")


def docx_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(markup_to_text(docx_to_markup(payload)), "TXT")


def docx_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Convert DOCX to Markdown via mammoth HTML and markdownify."""
    try:
        from markdownify import markdownify as md
    except ImportError as e:
        raise ConversionFailedError(
            "markdownify is not installed. Run: pip install markdownify"
        ) from e

    markdown = md(
        docx_to_markup(payload),
        heading_style="atx",
        bullets="-",
    )
    return text_result(clean_markdown(markdown), "MD")


def docx_to_pdf(payload: bytes, context: ConversionContext) -> ConversionResult:
    markup = docx_to_markup(payload)
    data = render_pdf(f"<html><body>{markup}</body></html>")
    return ConversionResult(data=data, mime_type=mime_type_for("PDF"))
