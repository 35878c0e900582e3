"""Tests for the command line interface."""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from formatswap import __version__
from formatswap.cli import main
from formatswap.config import Settings
from formatswap.orchestrator import ConversionService


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("formatswap").handlers.clear()


@pytest.fixture(autouse=True)
def service():
    service = ConversionService(settings=Settings(), engine=MagicMock())
    with patch("formatswap.converter.default_service", return_value=service):
        yield service


class TestFormatsCommand:
    def test_lists_targets(self, runner):
        result = runner.invoke(main, ["formats", "md"])

        assert result.exit_code == 0
        assert result.output.split() == ["HTML", "TXT"]

    def test_unknown_source(self, runner):
        result = runner.invoke(main, ["formats", "heic"])

        assert result.exit_code == 0
        assert "No conversions available for HEIC." in result.output


class TestConvertCommand:
    def test_converts_file(self, runner, tmp_path):
        source = tmp_path / "data.csv"
        source.write_text("a,b\n1,2\n", encoding="utf-8")

        result = runner.invoke(main, ["convert", str(source), "--to", "json"])

        assert result.exit_code == 0
        assert "[OK] data.csv" in result.output
        assert "Converted 1 file(s), 0 error(s)." in result.output
        assert json.loads((tmp_path / "data.json").read_text(encoding="utf-8")) == [
            {"a": "1", "b": "2"}
        ]

    def test_reports_failures(self, runner, tmp_path):
        source = tmp_path / "page.md"
        source.write_text("# Hi", encoding="utf-8")

        result = runner.invoke(main, ["convert", str(source), "--to", "pdf"])

        assert result.exit_code == 0
        assert "Converted 0 file(s), 1 error(s)." in result.output

    def test_output_directory(self, runner, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("hello", encoding="utf-8")
        out = tmp_path / "out"

        result = runner.invoke(main, ["convert", str(source), "-t", "MD", "-o", str(out)])

        assert result.exit_code == 0
        assert (out / "notes.md").read_text(encoding="utf-8") == "```\nhello\n```"

    def test_dry_run(self, runner, tmp_path):
        (tmp_path / "a.tsv").write_text("x\ty", encoding="utf-8")

        result = runner.invoke(main, ["convert", str(tmp_path), "--to", "csv", "--dry-run"])

        assert result.exit_code == 0
        assert "Would convert 1 file(s)." in result.output
        assert not (tmp_path / "a.csv").exists()

    def test_format_filter(self, runner, tmp_path):
        (tmp_path / "a.csv").write_text("k,v\n1,2\n", encoding="utf-8")
        (tmp_path / "b.tsv").write_text("k\tv\n1\t2\n", encoding="utf-8")

        result = runner.invoke(main, ["convert", str(tmp_path), "--to", "json", "-f", "TSV"])

        assert result.exit_code == 0
        assert "Converted 1 file(s), 0 error(s)." in result.output
        assert (tmp_path / "b.json").exists()
        assert not (tmp_path / "a.json").exists()

    def test_format_filter_rejects_unknown_source(self, runner, tmp_path):
        result = runner.invoke(main, ["convert", str(tmp_path), "--to", "json", "-f", "heic"])

        assert result.exit_code != 0
        assert "Invalid value" in result.output

    def test_missing_path(self, runner, tmp_path):
        result = runner.invoke(main, ["convert", str(tmp_path / "nope.csv"), "--to", "json"])

        assert result.exit_code != 0
        assert "does not exist" in result.output

    def test_target_is_required(self, runner, tmp_path):
        result = runner.invoke(main, ["convert", str(tmp_path)])
        assert result.exit_code != 0

    def test_no_files_found(self, runner, tmp_path):
        result = runner.invoke(main, ["convert", str(tmp_path), "--to", "json"])

        assert result.exit_code == 0
        assert "No files found to convert." in result.output


class TestVersion:
    def test_version_option(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
