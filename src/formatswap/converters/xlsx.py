"""XLSX reading and writing using openpyxl."""

import csv
import io
import math
import re
from datetime import date, datetime, time
from typing import Any

from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    decode_text,
    replace_surrogates,
    text_result,
)
from formatswap.converters.structured import dump_json, js_number, js_string, load_json
from formatswap.errors import ConversionFailedError
from formatswap.formats import mime_type_for

SHEET_NAME = "Sheet1"

_INTEGER = re.compile(r"^-?\d+$")
_DECIMAL = re.compile(r"^-?(\d+\.\d*|\.\d+)([eE][-+]?\d+)?$")


def _load_workbook(payload: bytes):
    try:
        from openpyxl import load_workbook
    except ImportError as e:
        raise ConversionFailedError("openpyxl is not installed. Run: pip install openpyxl") from e

    try:
        return load_workbook(io.BytesIO(payload), data_only=True)
    except Exception as e:
        raise ConversionFailedError(
            "Failed to read Excel workbook. Please ensure your Excel file is valid "
            f"and not password-protected. ({e})"
        ) from e


def _trim_empty_rows(rows: list[tuple]) -> list[tuple]:
    """Remove completely empty rows and trailing empty columns."""
    non_empty_rows = [
        row for row in rows
        if any(cell is not None and str(cell).strip() for cell in row)
    ]

    if not non_empty_rows:
        return []

    max_col = 0
    for row in non_empty_rows:
        for i, cell in enumerate(row):
            if cell is not None and str(cell).strip():
                max_col = max(max_col, i + 1)

    return [row[:max_col] for row in non_empty_rows]


def _sheet_rows(sheet) -> list[tuple]:
    return _trim_empty_rows(list(sheet.iter_rows(values_only=True)))


def _first_sheet_rows(payload: bytes) -> list[tuple]:
    workbook = _load_workbook(payload)
    try:
        return _sheet_rows(workbook.worksheets[0])
    finally:
        workbook.close()


def _json_cell(cell: Any) -> Any:
    if isinstance(cell, (datetime, date, time)):
        return cell.isoformat()
    return cell


def _format_cell(cell: Any) -> str:
    """Format a cell value as text."""
    if cell is None:
        return ""
    if isinstance(cell, bool):
        return "TRUE" if cell else "FALSE"
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    if isinstance(cell, (datetime, date, time)):
        return cell.isoformat()
    return str(cell)


def _markdown_cell(cell: Any) -> str:
    cell_str = _format_cell(cell).strip()
    cell_str = cell_str.replace("|", "\\|")
    return cell_str.replace("\n", " ").replace("\r", "")


def _header_names(header: tuple) -> list[str]:
    """Name header cells, labelling blank ones __EMPTY, __EMPTY_1, ..."""
    names: list[str] = []
    empty_count = 0
    for cell in header:
        name = _format_cell(cell)
        if not name:
            name = "__EMPTY" if empty_count == 0 else f"__EMPTY_{empty_count}"
            empty_count += 1
        names.append(name)
    return names


def rows_to_markdown_table(rows: list[tuple]) -> str:
    """Convert rows to a Markdown table with the first row as header."""
    if not rows:
        return ""

    col_count = max(len(row) for row in rows)
    col_widths = [3] * col_count

    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(_markdown_cell(cell)))

    def render(row: tuple) -> str:
        cells = [
            _markdown_cell(row[i] if i < len(row) else None).ljust(col_widths[i])
            for i in range(col_count)
        ]
        return "| " + " | ".join(cells) + " |"

    lines = [render(rows[0])]
    lines.append("| " + " | ".join("-" * width for width in col_widths) + " |")
    lines.extend(render(row) for row in rows[1:])
    return "\n".join(lines)


def _coerce_number(value: str) -> Any:
    """Store numeric-looking CSV text as a number."""
    text = value.strip()
    if _INTEGER.match(text):
        return int(text)
    if _DECIMAL.match(text):
        return float(text)
    return value


def _write_workbook(rows: list[list[Any]]) -> bytes:
    try:
        from openpyxl import Workbook
    except ImportError as e:
        raise ConversionFailedError("openpyxl is not installed. Run: pip install openpyxl") from e

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME
    for row in rows:
        sheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# --- Converters ---


def xlsx_to_csv(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Export the first worksheet as CSV."""
    rows = _first_sheet_rows(payload)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for row in rows:
        writer.writerow([_format_cell(cell) for cell in row])

    return text_result(buffer.getvalue().rstrip("\n"), "CSV")


def xlsx_to_json(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Export the first worksheet as a list of records keyed by the header row.

    Empty cells are left out of their record.
    """
    rows = _first_sheet_rows(payload)
    if not rows:
        return text_result("[]", "JSON")

    headers = _header_names(rows[0])
    records = []
    for row in rows[1:]:
        record = {
            headers[i]: _json_cell(cell)
            for i, cell in enumerate(row)
            if cell is not None and str(cell) != ""
        }
        records.append(record)

    return text_result(dump_json(records), "JSON")


def xlsx_to_md(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Render every worksheet as a Markdown table under its sheet name."""
    workbook = _load_workbook(payload)
    markdown_parts: list[str] = []

    try:
        for sheet in workbook.worksheets:
            markdown_parts.append(f"## {sheet.title}\n")

            rows = _sheet_rows(sheet)
            if not rows:
                markdown_parts.append("*Empty sheet*\n")
                continue

            markdown_parts.append(rows_to_markdown_table(rows))
            markdown_parts.append("")
    finally:
        workbook.close()

    return text_result("\n".join(markdown_parts).strip(), "MD")


def csv_to_xlsx(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Write CSV rows to a single sheet, storing numeric text as numbers."""
    reader = csv.reader(io.StringIO(decode_text(payload)))
    rows = [[_coerce_number(value) for value in row] for row in reader if row]
    return ConversionResult(data=_write_workbook(rows), mime_type=mime_type_for("XLSX"))


def json_to_xlsx(payload: bytes, context: ConversionContext) -> ConversionResult:
    """Write JSON records to a single sheet.

    The header is the union of all record keys in first-seen order.
    """
    value = load_json(decode_text(payload))
    records = value if isinstance(value, list) else [value]

    headers: list[str] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        for key in record:
            if key not in headers:
                headers.append(key)

    rows: list[list[Any]] = [[replace_surrogates(key) for key in headers]]
    for record in records:
        if not isinstance(record, dict):
            continue
        row = []
        for key in headers:
            cell = record.get(key)
            if isinstance(cell, (dict, list)):
                cell = js_string(cell)
            elif isinstance(cell, float) and not math.isfinite(cell):
                cell = js_number(cell)
            if isinstance(cell, str):
                cell = replace_surrogates(cell)
            row.append(cell)
        rows.append(row)

    return ConversionResult(data=_write_workbook(rows), mime_type=mime_type_for("XLSX"))
