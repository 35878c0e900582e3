"""Structured data transcoders for JSON, CSV, TSV and XML.

Each format is parsed into a plain Python value (dicts, lists, strings)
and rendered from one, so multi-hop conversions such as TSV -> XML chain
the single-hop value functions instead of re-serializing in between.

The CSV handling is deliberately naive: fields are split on every comma,
string values are quoted without escaping, and only the first record's
keys become the header row.
"""

import json
import math
import re
from decimal import Decimal
from typing import Any

from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    decode_text,
    text_result,
)
from formatswap.errors import InvalidInputError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

_SURROUNDING_QUOTE = re.compile(r'^"|"$')

# Marks a header with no value in a record
_MISSING = object()


# --- Value helpers ---


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name}")


def parse_json(text: str) -> Any:
    """Parse JSON text, rejecting the NaN/Infinity extensions."""
    return json.loads(text, parse_constant=_reject_constant)


def load_json(text: str) -> Any:
    """Parse JSON input, raising a validation error on failure."""
    try:
        return parse_json(text)
    except ValueError as e:
        raise InvalidInputError(f"Invalid JSON: parsing failed ({e})", kind="invalid_json") from e


def _finite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_finite(item) for item in value]
    return value


def dump_json(value: Any) -> str:
    """Serialize a value as pretty-printed JSON with 2-space indentation.

    Non-finite numbers (an overflowing literal such as 1e400) become null.
    """
    return json.dumps(_finite(value), indent=2, ensure_ascii=False)


def js_number(value: float) -> str:
    """Format a number the way JavaScript's Number#toString does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    if value < 0:
        return "-" + js_number(-value)

    # Shortest round-trip digits; n is the decimal point position
    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    n = exponent + len(digit_tuple)
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    k = len(digits)

    if k <= n <= 21:
        return digits + "0" * (n - k)
    if 0 < n <= 21:
        return f"{digits[:n]}.{digits[n:]}"
    if -6 < n <= 0:
        return "0." + "0" * -n + digits

    e = n - 1
    mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def js_string(value: Any) -> str:
    """Render a JSON value the way JavaScript string coercion does."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return js_number(value)
    if isinstance(value, int):
        if abs(value) < 10**21:
            return str(value)
        try:
            return js_number(float(value))
        except OverflowError:
            return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, dict):
        return "[object Object]"
    if isinstance(value, list):
        return ",".join("" if item is None else js_string(item) for item in value)
    return str(value)


# --- CSV ---


def _record_keys(record: Any) -> list[str]:
    if record is None:
        raise InvalidInputError("Invalid JSON: records must be objects", kind="invalid_json")
    if isinstance(record, dict):
        return list(record)
    if isinstance(record, (list, str)):
        return [str(i) for i in range(len(record))]
    return []


def _record_field(record: Any, key: str) -> Any:
    if record is None:
        raise InvalidInputError("Invalid JSON: records must be objects", kind="invalid_json")
    if isinstance(record, dict):
        return record.get(key, _MISSING)
    if isinstance(record, (list, str)) and key.isdigit() and int(key) < len(record):
        return record[int(key)]
    return _MISSING


def _csv_cell(value: Any) -> str:
    if value is _MISSING or value is None:
        return ""
    if isinstance(value, str):
        return f'"{value}"'
    return js_string(value)


def records_to_csv(value: Any) -> str:
    """Render JSON records as CSV text.

    A non-list value is treated as a single record. The header is the key
    order of the first record; later records are projected onto it and
    missing fields render empty. Strings are wrapped in double quotes
    with no escaping.

    Args:
        value: Parsed JSON value.

    Returns:
        CSV text, empty for an empty list.
    """
    records = value if isinstance(value, list) else [value]
    if not records:
        return ""

    keys = _record_keys(records[0])
    lines = [",".join(keys)]
    for record in records:
        if not keys:
            lines.append("")
            continue
        lines.append(",".join(_csv_cell(_record_field(record, key)) for key in keys))
    return "\n".join(lines)


def _unquote(field: str) -> str:
    return _SURROUNDING_QUOTE.sub("", field.strip())


def csv_to_records(text: str) -> list[dict[str, str]]:
    """Parse CSV text into a list of records.

    Lines are split on newlines and fields on every comma; one layer of
    surrounding double quotes is stripped per field. Blank lines are
    dropped and the first remaining line is the header. All values stay
    strings.

    Args:
        text: CSV text.

    Returns:
        One dict per data line, keyed by header. Fields past the end of a
        short line are left out.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return []

    headers = [_unquote(h) for h in lines[0].split(",")]
    records: list[dict[str, str]] = []

    for line in lines[1:]:
        values = [_unquote(v) for v in line.split(",")]
        record: dict[str, Any] = {}
        for i, header in enumerate(headers):
            record[header] = values[i] if i < len(values) else _MISSING
        records.append({k: v for k, v in record.items() if v is not _MISSING})

    return records


def csv_to_tsv_text(text: str) -> str:
    """Swap every comma for a tab, quoted or not."""
    return text.replace(",", "\t")


def tsv_to_csv_text(text: str) -> str:
    """Swap every tab for a comma, quoted or not."""
    return text.replace("\t", ",")


def pipe_table(text: str, separator: str) -> str:
    """Render delimited text as a Markdown pipe table without quote handling."""
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return ""

    headers = lines[0].split(separator)
    md = "| " + " | ".join(headers) + " |\n"
    md += "| " + " | ".join("---" for _ in headers) + " |\n"
    for row in lines[1:]:
        md += "| " + " | ".join(row.split(separator)) + " |\n"
    return md


# --- XML ---


def value_to_xml(value: Any, root: str = "root") -> str:
    """Render a JSON value as nested XML elements.

    Objects become child elements named after their keys and scalars
    become text. Lists get no special treatment: their indexes become
    element names. Nothing is escaped.

    Args:
        value: Parsed JSON value.
        root: Name of the enclosing element.

    Returns:
        XML fragment without a declaration.
    """
    parts = [f"<{root}>"]

    if isinstance(value, dict):
        items = list(value.items())
    elif isinstance(value, list):
        items = [(str(i), item) for i, item in enumerate(value)]
    else:
        items = []

    for key, child in items:
        if child is None or isinstance(child, (dict, list)):
            parts.append(value_to_xml(child, key))
        else:
            parts.append(f"<{key}>{js_string(child)}</{key}>")

    parts.append(f"</{root}>")
    return "".join(parts)


def _node_name(tag: str, nsmap: dict[str | None, str]) -> str:
    from lxml import etree

    qname = etree.QName(tag)
    if qname.namespace is None:
        return qname.localname
    for prefix, uri in nsmap.items():
        if prefix and uri == qname.namespace:
            return f"{prefix}:{qname.localname}"
    return qname.localname


def _append_child(obj: dict[str, Any], name: str, value: Any) -> None:
    if name not in obj:
        obj[name] = value
        return
    existing = obj[name]
    if not isinstance(existing, list):
        obj[name] = [existing]
    obj[name].append(value)


def _element_to_value(element: Any) -> Any:
    obj: dict[str, Any] = {}

    if element.attrib:
        obj["@attributes"] = {
            _node_name(key, element.nsmap): value
            for key, value in element.attrib.items()
        }

    # Whitespace between child elements is layout, not content
    has_children = len(element) > 0

    if element.text and (element.text.strip() or not has_children):
        _append_child(obj, "#text", element.text)

    for child in element:
        if isinstance(child.tag, str):
            _append_child(obj, _node_name(child.tag, child.nsmap), _element_to_value(child))
        if child.tail and child.tail.strip():
            _append_child(obj, "#text", child.tail)

    if list(obj) == ["#text"]:
        return obj["#text"]
    return obj


def xml_to_value(payload: bytes) -> Any:
    """Parse XML bytes into a JSON-shaped value.

    Parsing is lenient: recoverable syntax errors are repaired and
    whatever structure survives is converted. Attributes are collected
    under "@attributes", repeated sibling names become lists in document
    order, and an element holding only text collapses to that text.

    Args:
        payload: Raw XML document bytes.

    Returns:
        Value for the document element.

    Raises:
        InvalidInputError: If no element at all can be recovered.
    """
    from lxml import etree

    parser = etree.XMLParser(
        recover=True,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        root = etree.fromstring(payload, parser)
    except etree.XMLSyntaxError as e:
        raise InvalidInputError(f"Invalid XML: {e}", kind="invalid_xml") from e

    if root is None:
        raise InvalidInputError("Invalid XML: no root element found", kind="invalid_xml")

    return _element_to_value(root)


def xml_value_to_records(value: Any) -> list[Any]:
    """Pick the record list out of a converted XML document.

    The value under the root object's first key is used; a list is taken
    as-is and anything else becomes a one-element list.
    """
    if isinstance(value, dict):
        if not value:
            raise InvalidInputError("Invalid XML: root element has no content", kind="invalid_xml")
        first = value[next(iter(value))]
        return first if isinstance(first, list) else [first]
    return [value]


# --- Converters ---


def json_to_csv(payload: bytes, context: ConversionContext) -> ConversionResult:
    value = load_json(decode_text(payload))
    return text_result(records_to_csv(value), "CSV")


def json_to_tsv(payload: bytes, context: ConversionContext) -> ConversionResult:
    value = load_json(decode_text(payload))
    return text_result(csv_to_tsv_text(records_to_csv(value)), "TSV")


def json_to_xml(payload: bytes, context: ConversionContext) -> ConversionResult:
    value = load_json(decode_text(payload))
    return text_result(XML_DECLARATION + value_to_xml(value), "XML")


def json_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Pretty-print JSON, or pass the text through when it does not parse."""
    text = decode_text(payload)
    try:
        return text_result(dump_json(parse_json(text)), "TXT")
    except ValueError:
        return text_result(text, "TXT")


def json_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result("```json\n" + decode_text(payload) + "\n```", "MD")


def csv_to_json(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(dump_json(csv_to_records(decode_text(payload))), "JSON")


def csv_to_tsv(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(csv_to_tsv_text(decode_text(payload)), "TSV")


def csv_to_xml(payload: bytes, context: ConversionContext) -> ConversionResult:
    records = csv_to_records(decode_text(payload))
    return text_result(XML_DECLARATION + value_to_xml(records), "XML")


def csv_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(dump_json(csv_to_records(decode_text(payload))), "TXT")


def csv_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(pipe_table(decode_text(payload), ","), "MD")


def tsv_to_csv(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(tsv_to_csv_text(decode_text(payload)), "CSV")


def tsv_to_json(payload: bytes, context: ConversionContext) -> ConversionResult:
    records = csv_to_records(tsv_to_csv_text(decode_text(payload)))
    return text_result(dump_json(records), "JSON")


def tsv_to_xml(payload: bytes, context: ConversionContext) -> ConversionResult:
    records = csv_to_records(tsv_to_csv_text(decode_text(payload)))
    return text_result(XML_DECLARATION + value_to_xml(records), "XML")


def tsv_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(decode_text(payload), "TXT")


def tsv_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(pipe_table(decode_text(payload), "\t"), "MD")


def xml_to_json(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(dump_json(xml_to_value(payload)), "JSON")


def xml_to_csv(payload: bytes, context: ConversionContext) -> ConversionResult:
    records = xml_value_to_records(xml_to_value(payload))
    return text_result(records_to_csv(records), "CSV")


def xml_to_tsv(payload: bytes, context: ConversionContext) -> ConversionResult:
    records = xml_value_to_records(xml_to_value(payload))
    return text_result(csv_to_tsv_text(records_to_csv(records)), "TSV")


def xml_to_txt(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result(dump_json(xml_to_value(payload)), "TXT")


def xml_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    return text_result("```xml\n" + decode_text(payload) + "\n```", "MD")
