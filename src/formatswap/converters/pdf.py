"""PDF text extraction using PyMuPDF."""

import html
import time

from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    clean_markdown,
    text_result,
)
from formatswap.converters.documents import write_docx
from formatswap.errors import ConversionFailedError
from formatswap.formats import mime_type_for


def _open_pdf(payload: bytes):
    """Open PDF bytes as a PyMuPDF document."""
    try:
        import pymupdf
    except ImportError as e:
        raise ConversionFailedError("pymupdf is not installed. Run: pip install pymupdf") from e

    try:
        return pymupdf.open(stream=payload, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise ConversionFailedError(f"Failed to open PDF: {e}") from e


def _page_text(page) -> str:
    """Join a page's text spans with single spaces."""
    items: list[str] = []
    for block in page.get_text("dict")["blocks"]:
        # Type 1 blocks are images
        if block.get("type") != 0:
            continue
        for line in block["lines"]:
            for span in line["spans"]:
                items.append(span["text"])
    return " ".join(items)


def extract_pdf_text(payload: bytes) -> str:
    """Extract the text of every page, in page order.

    Pages are read one after another from the same document handle.
    Within a page the text items are joined by a space; pages are joined
    by a newline.

    Args:
        payload: PDF file bytes.

    Returns:
        The extracted text.
    """
    with _open_pdf(payload) as doc:
        pages = [_page_text(page) for page in doc]
    return "\n".join(pages)


# --- Converters ---


def pdf_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(extract_pdf_text(payload), "TXT")


def pdf_to_html(payload: bytes, context: ConversionContext) -> ConversionResult:
    lines = extract_pdf_text(payload).split("\n")
    body = "".join(f"<p>{html.escape(line)}</p>" for line in lines)
    return text_result(f"<html><body>{body}</body></html>", "HTML")


def pdf_to_docx(payload: bytes, context: ConversionContext) -> ConversionResult:
    lines = extract_pdf_text(payload).split("\n")
    return ConversionResult(data=write_docx(lines), mime_type=mime_type_for("DOCX"))


def pdf_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Convert a PDF to Markdown with pymupdf4llm."""
    try:
        import pymupdf4llm
    except ImportError as e:
        raise ConversionFailedError(
            "pymupdf4llm is not installed. Run: pip install pymupdf4llm"
        ) from e

    with _open_pdf(payload) as doc:
        # Retry once on AttributeError: pymupdf4llm's find_tables has a
        # threading race that intermittently produces
        #   "'NoneType' object has no attribute 'tables'"
        markdown = ""
        for attempt in range(2):
            try:
                markdown = pymupdf4llm.to_markdown(doc)
                break
            except AttributeError:
                if attempt == 0:
                    time.sleep(0.5)
                else:
                    raise

    return text_result(clean_markdown(markdown), "MD")
