"""Tests for XLSX reading and writing."""

import io
import json
from datetime import date

import pytest
from openpyxl import Workbook, load_workbook

from formatswap.converters.base import ConversionContext
from formatswap.converters.xlsx import (
    SHEET_NAME,
    _header_names,
    _trim_empty_rows,
    csv_to_xlsx,
    json_to_xlsx,
    rows_to_markdown_table,
    xlsx_to_csv,
    xlsx_to_json,
    xlsx_to_md,
)
from formatswap.errors import ConversionFailedError


def _save(workbook: Workbook) -> bytes:
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _rows(data: bytes) -> list[tuple]:
    workbook = load_workbook(io.BytesIO(data))
    rows = list(workbook.active.iter_rows(values_only=True))
    workbook.close()
    return rows


@pytest.fixture
def context():
    return ConversionContext()


@pytest.fixture
def sample_xlsx():
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "People"
    sheet.append(["name", "age", "joined"])
    sheet.append(["Ann", 30, date(2024, 1, 15)])
    sheet.append(["Bob", None, None])
    sheet.append([None, None, None])

    extra = workbook.create_sheet("Notes")
    extra.append(["note"])
    extra.append(["a | b"])

    workbook.create_sheet("Blank")
    return _save(workbook)


class TestXlsxReading:
    def test_xlsx_to_csv_first_sheet(self, context, sample_xlsx):
        result = xlsx_to_csv(sample_xlsx, context)
        assert result.text == "name,age,joined\nAnn,30,2024-01-15T00:00:00\nBob,,"
        assert result.mime_type == "text/csv"

    def test_xlsx_to_json_skips_empty_cells(self, context, sample_xlsx):
        result = xlsx_to_json(sample_xlsx, context)
        assert json.loads(result.text) == [
            {"name": "Ann", "age": 30, "joined": "2024-01-15T00:00:00"},
            {"name": "Bob"},
        ]

    def test_xlsx_to_md_renders_every_sheet(self, context, sample_xlsx):
        text = xlsx_to_md(sample_xlsx, context).text

        assert text.startswith("## People")
        assert "| name | age | joined" in text
        assert "## Notes" in text
        assert "a \\| b" in text
        assert text.endswith("## Blank\n\n*Empty sheet*")

    def test_invalid_workbook(self, context):
        with pytest.raises(ConversionFailedError, match="Failed to read Excel workbook"):
            xlsx_to_csv(b"not a workbook", context)

    def test_empty_workbook_json(self, context):
        assert xlsx_to_json(_save(Workbook()), context).text == "[]"


class TestXlsxWriting:
    def test_csv_to_xlsx_coerces_numbers(self, context):
        result = csv_to_xlsx(b"a,b\n1,x\n2.5,007y\n", context)

        assert _rows(result.data) == [("a", "b"), (1, "x"), (2.5, "007y")]
        assert result.mime_type == (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

    def test_json_to_xlsx_unions_keys(self, context):
        payload = json.dumps([{"a": 1}, {"b": "two", "c": [1, 2]}]).encode()
        result = json_to_xlsx(payload, context)

        assert _rows(result.data) == [("a", "b", "c"), (1, None, None), (None, "two", "1,2")]

    def test_json_to_xlsx_replaces_lone_surrogates(self, context):
        result = json_to_xlsx(b'[{"\\ud800k": "\\udc00v"}]', context)

        assert _rows(result.data) == [("\ufffdk",), ("\ufffdv",)]

    def test_json_to_xlsx_non_finite_numbers_become_text(self, context):
        result = json_to_xlsx(b'[{"a": 1e400, "b": -1e400}]', context)

        assert _rows(result.data) == [("a", "b"), ("Infinity", "-Infinity")]

    def test_single_sheet_name(self, context):
        result = json_to_xlsx(b'{"a": 1}', context)

        workbook = load_workbook(io.BytesIO(result.data))
        assert workbook.sheetnames == [SHEET_NAME]
        workbook.close()


class TestTableHelpers:
    def test_trim_empty_rows_and_columns(self):
        rows = [("a", None, None), (None, None, None), ("b", "c", "  ")]
        assert _trim_empty_rows(rows) == [("a", None), ("b", "c")]

    def test_header_names_label_blanks(self):
        assert _header_names(("x", None, "", 3)) == ["x", "__EMPTY", "__EMPTY_1", "3"]

    def test_markdown_table_pads_columns(self):
        table = rows_to_markdown_table([("h", "long header"), (1, True)])
        assert table.split("\n") == [
            "| h   | long header |",
            "| --- | ----------- |",
            "| 1   | TRUE        |",
        ]
