"""Tests for the converter registry."""

import pytest

from formatswap.converters import (
    CONVERTER_REGISTRY,
    get_converter,
    get_supported_sources,
    list_targets,
)
from formatswap.converters import structured, text
from formatswap.formats import AUDIO_FORMATS, IMAGE_FORMATS, VIDEO_FORMATS


class TestRegistryRows:
    @pytest.mark.parametrize("source,targets", [
        ("TXT", ["HTML", "JSON", "CSV", "XML", "MD", "PDF", "DOCX"]),
        ("JSON", ["CSV", "TSV", "XML", "TXT", "MD", "XLSX"]),
        ("CSV", ["JSON", "TSV", "XML", "TXT", "MD", "XLSX"]),
        ("XML", ["JSON", "CSV", "TSV", "TXT", "MD"]),
        ("HTML", ["TXT", "MD", "PDF", "DOCX"]),
        ("TSV", ["CSV", "JSON", "XML", "TXT", "MD"]),
        ("MD", ["HTML", "TXT"]),
        ("PDF", ["TXT", "HTML", "DOCX", "MD"]),
        ("DOCX", ["HTML", "TXT", "MD", "PDF"]),
        ("XLSX", ["CSV", "JSON", "MD"]),
    ])
    def test_text_and_document_rows(self, source, targets):
        assert list_targets(source) == targets

    def test_image_rows_cover_every_other_image_format(self):
        for source in IMAGE_FORMATS:
            expected = [t for t in IMAGE_FORMATS if t != source]
            assert list_targets(source) == expected

    def test_video_rows_include_audio_extraction(self):
        assert list_targets("MP4") == ["WEBM", "AVI", "MOV", "MKV", "MP3", "WAV"]
        for source in VIDEO_FORMATS:
            assert list_targets(source)[-2:] == ["MP3", "WAV"]

    def test_audio_rows_cover_every_other_audio_format(self):
        for source in AUDIO_FORMATS:
            expected = [t for t in AUDIO_FORMATS if t != source]
            assert list_targets(source) == expected

    def test_no_row_maps_a_format_to_itself(self):
        for source, row in CONVERTER_REGISTRY.items():
            assert source not in row

    def test_every_entry_is_callable(self):
        for row in CONVERTER_REGISTRY.values():
            for converter in row.values():
                assert callable(converter)


class TestLookup:
    def test_source_is_canonicalized(self):
        assert get_converter("csv", "JSON") is structured.csv_to_json
        assert get_converter("htm", "TXT") is text.html_to_txt

    def test_target_must_match_exactly(self):
        assert get_converter("CSV", "json") is None

    def test_unregistered_pair(self):
        assert get_converter("MD", "PDF") is None
        assert get_converter("HEIC", "PNG") is None

    def test_unknown_source_has_no_targets(self):
        assert list_targets("HEIC") == []

    def test_supported_sources(self):
        sources = get_supported_sources()
        assert sources[:3] == ["TXT", "JSON", "CSV"]
        assert "JPG" in sources
        assert "M4A" in sources


class TestReadOnly:
    def test_rows_cannot_be_added(self):
        with pytest.raises(TypeError):
            CONVERTER_REGISTRY["HEIC"] = {}

    def test_targets_cannot_be_replaced(self):
        with pytest.raises(TypeError):
            CONVERTER_REGISTRY["CSV"]["JSON"] = structured.tsv_to_json
