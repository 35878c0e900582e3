"""Plain text, Markdown and HTML rewrites.

These are line-oriented regex substitutions covering headings, emphasis,
inline code, paragraphs and line breaks. They are not a Markdown or HTML
parser: nothing is escaped, entities are left alone and script content
is kept as text.
"""

import json
import re

from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    decode_text,
    text_result,
)
from formatswap.converters.structured import parse_json

_TAG = re.compile(r"<[^>]*>")

_HTML_TO_MD_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE), r"# \1\n\n"),
    (re.compile(r"<h2[^>]*>(.*?)</h2>", re.IGNORECASE), r"## \1\n\n"),
    (re.compile(r"<h3[^>]*>(.*?)</h3>", re.IGNORECASE), r"### \1\n\n"),
    (re.compile(r"<strong[^>]*>(.*?)</strong>", re.IGNORECASE), r"**\1**"),
    (re.compile(r"<b[^>]*>(.*?)</b>", re.IGNORECASE), r"**\1**"),
    (re.compile(r"<em[^>]*>(.*?)</em>", re.IGNORECASE), r"*\1*"),
    (re.compile(r"<i[^>]*>(.*?)</i>", re.IGNORECASE), r"*\1*"),
    (re.compile(r"<code[^>]*>(.*?)</code>", re.IGNORECASE), r"`\1`"),
    (re.compile(r"<p[^>]*>(.*?)</p>", re.IGNORECASE), r"\1\n\n"),
    (re.compile(r"<br[^>]*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"<[^>]+>"), ""),
]

_MD_TO_HTML_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^### (.*$)", re.IGNORECASE | re.MULTILINE), r"<h3>\1</h3>"),
    (re.compile(r"^## (.*$)", re.IGNORECASE | re.MULTILINE), r"<h2>\1</h2>"),
    (re.compile(r"^# (.*$)", re.IGNORECASE | re.MULTILINE), r"<h1>\1</h1>"),
    (re.compile(r"\*\*(.*)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.*)\*"), r"<em>\1</em>"),
    (re.compile(r"`([^`]+)`"), r"<code>\1</code>"),
    (re.compile(r"\n\n"), "</p><p>"),
    (re.compile(r"\n"), "<br>"),
]


def strip_tags(html: str) -> str:
    """Remove every tag from an HTML string and trim the result."""
    return _TAG.sub("", html).strip()


def html_to_markdown(html: str) -> str:
    """Rewrite common HTML constructs as Markdown."""
    md = html
    for pattern, replacement in _HTML_TO_MD_RULES:
        md = pattern.sub(replacement, md)
    return md.strip()


def markdown_to_html(markdown: str) -> str:
    """Rewrite common Markdown constructs as an HTML document."""
    html = markdown
    for pattern, replacement in _MD_TO_HTML_RULES:
        html = pattern.sub(replacement, html)
    return f"<html><body><p>{html}</p></body></html>"


def wrap_pre(text: str) -> str:
    return f"<html><body><pre>{text}</pre></body></html>"


# --- Converters ---


def txt_to_html(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(wrap_pre(decode_text(payload)), "HTML")


def txt_to_json(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Pass JSON text through unchanged, otherwise wrap it as {"text": ...}."""
    text = decode_text(payload)
    try:
        parse_json(text)
        return text_result(text, "JSON")
    except ValueError:
        wrapped = json.dumps({"text": text}, ensure_ascii=False, separators=(",", ":"))
        return text_result(wrapped, "JSON")


def txt_to_csv(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Turn each non-blank line into one quoted CSV field."""
    text = decode_text(payload)
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    if not lines:
        return text_result(text, "CSV")

    csv = "\n".join('"' + line.replace('"', '""') + '"' for line in lines)
    return text_result(csv, "CSV")


def txt_to_xml(payload: bytes, context: ConversionContext) -> ConversionResult:
    xml = f"<root><text><![CDATA[{decode_text(payload)}]]></text></root>"
    return text_result(xml, "XML", mime_type="text/xml")


def txt_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result("```\n" + decode_text(payload) + "\n```", "MD")


def html_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(strip_tags(decode_text(payload)), "TXT")


def html_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(html_to_markdown(decode_text(payload)), "MD")


def md_to_html(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(markdown_to_html(decode_text(payload)), "HTML")


def md_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(decode_text(payload), "TXT")
