"""Tests for file discovery and batch conversion."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from formatswap.config import Settings
from formatswap.converter import FileConverter
from formatswap.orchestrator import ConversionService
from formatswap.utils.file_utils import discover_files, get_output_path, source_extensions


@pytest.fixture
def service():
    return ConversionService(settings=Settings(max_workers=2), engine=MagicMock())


@pytest.fixture
def src(tmp_path):
    """A source tree with convertible and unrelated files."""
    src = tmp_path / "src"
    (src / "nested").mkdir(parents=True)
    (src / "people.csv").write_text("name,age\nAnn,30\n", encoding="utf-8")
    (src / "config.json").write_text('{"a": 1}', encoding="utf-8")
    (src / "notes.xyz").write_text("ignored", encoding="utf-8")
    (src / "nested" / "more.tsv").write_text("k\tv\nx\t1\n", encoding="utf-8")
    return src


class TestDiscoverFiles:
    def test_flat_directory(self, src):
        names = [p.name for p in discover_files([src])]
        assert names == ["config.json", "people.csv"]

    def test_recursive(self, src):
        names = [p.name for p in discover_files([src], recursive=True)]
        assert names == ["config.json", "more.tsv", "people.csv"]

    def test_format_filter(self, src):
        names = [p.name for p in discover_files([src], recursive=True, formats=["tsv"])]
        assert names == ["more.tsv"]

    def test_format_filter_accepts_aliases(self, tmp_path):
        for name in ("a.jpg", "b.jpeg", "c.png", "d.csv"):
            (tmp_path / name).write_bytes(b"x")

        names = [p.name for p in discover_files([tmp_path], formats=["JPEG"])]
        assert names == ["a.jpg", "b.jpeg"]

    def test_format_filter_ignores_unregistered_formats(self, src):
        assert discover_files([src], formats=["xyz"]) == []

    def test_explicit_file_and_duplicates(self, src):
        files = discover_files([src / "people.csv", src, src / "notes.xyz"])
        assert [p.name for p in files] == ["config.json", "people.csv"]

    def test_source_extensions_include_aliases(self):
        extensions = source_extensions()
        assert {".csv", ".jpg", ".jpeg", ".htm", ".mp4", ".m4a"} <= extensions
        assert ".xyz" not in extensions


class TestGetOutputPath:
    def test_same_directory(self):
        assert get_output_path(Path("/data/a.csv"), "JSON") == Path("/data/a.json")

    def test_alias_target_extension(self):
        assert get_output_path(Path("/data/a.png"), "jpeg") == Path("/data/a.jpg")

    def test_output_dir(self):
        assert get_output_path(Path("/data/a.csv"), "XML", Path("/out")) == Path("/out/a.xml")

    def test_preserves_relative_structure(self):
        path = get_output_path(Path("/data/sub/a.csv"), "MD", Path("/out"), Path("/data"))
        assert path == Path("/out/sub/a.md")

    def test_outside_source_base(self):
        path = get_output_path(Path("/elsewhere/a.csv"), "MD", Path("/out"), Path("/data"))
        assert path == Path("/out/a.md")


class TestConvertAndSave:
    def test_writes_output_next_to_source(self, service, src):
        converter = FileConverter(service=service)
        result = converter.convert_and_save(src / "people.csv", "JSON")

        assert result.success is True
        assert result.output_path == src / "people.json"
        assert json.loads(result.output_path.read_text(encoding="utf-8")) == [
            {"name": "Ann", "age": "30"}
        ]
        assert result.size == result.output_path.stat().st_size

    def test_failure_reports_message_and_suggestion(self, service, src):
        converter = FileConverter(service=service)
        result = converter.convert_and_save(src / "config.json", "JSON")

        assert result.success is False
        assert result.error == (
            "Conversion from JSON to JSON is not supported. "
            "This conversion combination is not currently supported. Try a different output format."
        )
        assert "Try a different output format." in result.error
        assert result.can_retry is False
        assert not (src / "config.json.json").exists()

    def test_unreadable_file(self, service, tmp_path):
        converter = FileConverter(service=service)
        result = converter.convert_and_save(tmp_path / "missing.csv", "JSON")

        assert result.success is False
        assert "Could not read file" in result.error


class TestConvertBatch:
    def test_converts_each_file_independently(self, service, src, tmp_path):
        out = tmp_path / "out"
        converter = FileConverter(output_dir=out, service=service)

        results = converter.convert_batch([src], "XML", recursive=True)

        assert [r.source_path.name for r in results] == ["config.json", "more.tsv", "people.csv"]
        assert [r.success for r in results] == [True, True, True]
        assert (out / "config.xml").exists()
        assert (out / "nested" / "more.xml").exists()
        assert (out / "people.xml").read_text(encoding="utf-8").startswith("<?xml")

    def test_mixed_outcomes(self, service, src, tmp_path):
        out = tmp_path / "out"
        converter = FileConverter(output_dir=out, service=service)

        results = converter.convert_batch([src], "JSON")

        by_name = {r.source_path.name: r for r in results}
        assert by_name["people.csv"].success is True
        assert by_name["config.json"].success is False
        assert by_name["config.json"].error.startswith(
            "Conversion from JSON to JSON is not supported."
        )
        assert sorted(p.name for p in out.iterdir()) == ["people.json"]

    def test_tsv_output(self, service, src, tmp_path):
        converter = FileConverter(output_dir=tmp_path / "out", service=service)
        converter.convert_batch([src], "TSV")

        assert (tmp_path / "out" / "people.tsv").read_text(encoding="utf-8") == "name\tage\nAnn\t30\n"

    def test_format_filter(self, service, src, tmp_path):
        out = tmp_path / "out"
        converter = FileConverter(output_dir=out, service=service)

        results = converter.convert_batch([src], "XML", recursive=True, formats=["csv", "tsv"])

        assert [r.source_path.name for r in results] == ["more.tsv", "people.csv"]
        assert not (out / "config.xml").exists()

    def test_dry_run_writes_nothing(self, service, src, tmp_path):
        out = tmp_path / "out"
        converter = FileConverter(output_dir=out, service=service)

        results = converter.convert_batch([src], "MD", dry_run=True)

        assert [r.output_path for r in results] == [out / "config.md", out / "people.md"]
        assert not out.exists()

    def test_no_files(self, service, tmp_path):
        converter = FileConverter(service=service)
        assert converter.convert_batch([tmp_path], "JSON") == []

    def test_workers_default_to_settings(self, service):
        assert FileConverter(service=service).max_workers == 2
        assert FileConverter(max_workers=6, service=service).max_workers == 6
