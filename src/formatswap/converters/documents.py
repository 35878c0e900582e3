"""Document writers: paginated PDF rendering and DOCX paragraphs."""

import html
import io

from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    decode_text,
)
from formatswap.errors import ConversionFailedError
from formatswap.formats import mime_type_for

PAGE_SIZE = "a4"
PAGE_MARGIN = 36

BLOCK_TAGS = [
    "p", "div", "br", "li", "tr", "pre", "blockquote", "section", "article",
    "h1", "h2", "h3", "h4", "h5", "h6",
]


def render_pdf(markup: str) -> bytes:
    """Lay out HTML markup over as many A4 pages as it needs.

    Args:
        markup: HTML document or fragment.

    Returns:
        PDF file bytes.
    """
    try:
        import pymupdf
    except ImportError as e:
        raise ConversionFailedError("pymupdf is not installed. Run: pip install pymupdf") from e

    buffer = io.BytesIO()
    mediabox = pymupdf.paper_rect(PAGE_SIZE)
    where = mediabox + (PAGE_MARGIN, PAGE_MARGIN, -PAGE_MARGIN, -PAGE_MARGIN)

    try:
        story = pymupdf.Story(html=markup)
        writer = pymupdf.DocumentWriter(buffer)
        try:
            more = True
            while more:
                device = writer.begin_page(mediabox)
                more, _ = story.place(where)
                story.draw(device)
                writer.end_page()
        finally:
            writer.close()
    except (RuntimeError, ValueError) as e:
        raise ConversionFailedError(f"Failed to render PDF: {e}") from e

    return buffer.getvalue()


def write_docx(lines: list[str]) -> bytes:
    """Write one paragraph, holding a single run, per line.

    Args:
        lines: Paragraph texts in order.

    Returns:
        DOCX file bytes.
    """
    try:
        from docx import Document
    except ImportError as e:
        raise ConversionFailedError(
            "python-docx is not installed. Run: pip install python-docx"
        ) from e

    document = Document()
    for line in lines:
        paragraph = document.add_paragraph()
        paragraph.add_run(line)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def markup_to_text(markup: str) -> str:
    """Extract readable text from HTML, one line per block element."""
    try:
        from bs4 import BeautifulSoup
    except ImportError as e:
        raise ConversionFailedError(
            "beautifulsoup4 is not installed. Run: pip install beautifulsoup4"
        ) from e

    soup = BeautifulSoup(markup, "html.parser")

    for element in soup(["script", "style", "noscript"]):
        element.decompose()

    for element in soup.find_all(BLOCK_TAGS):
        element.append("\n")

    lines = [line.strip() for line in soup.get_text().split("\n")]
    return "\n".join(line for line in lines if line)


def text_to_markup(text: str) -> str:
    """Escape plain text into one <p> per line."""
    paragraphs = "".join(f"<p>{html.escape(line)}</p>" for line in text.split("\n"))
    return f"<html><body>{paragraphs}</body></html>"


# --- Converters ---


def txt_to_pdf(payload: bytes, context: ConversionContext) -> ConversionResult:
    data = render_pdf(text_to_markup(decode_text(payload)))
    return ConversionResult(data=data, mime_type=mime_type_for("PDF"))


def txt_to_docx(payload: bytes, context: ConversionContext) -> ConversionResult:
    data = write_docx(decode_text(payload).split("\n"))
    return ConversionResult(data=data, mime_type=mime_type_for("DOCX"))


def html_to_pdf(payload: bytes, context: ConversionContext) -> ConversionResult:
    data = render_pdf(decode_text(payload))
    return ConversionResult(data=data, mime_type=mime_type_for("PDF"))


def html_to_docx(payload: bytes, context: ConversionContext) -> ConversionResult:
    text = markup_to_text(decode_text(payload))
    data = write_docx(text.split("\n"))
    return ConversionResult(data=data, mime_type=mime_type_for("DOCX"))
