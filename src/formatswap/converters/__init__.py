"""Converter registry and exports."""

from collections.abc import Mapping
from types import MappingProxyType

from formatswap.converters import docx, documents, pdf, structured, text, xlsx
from formatswap.converters.base import (
    ConversionContext,
    ConversionResult,
    Converter,
    ProgressCallback,
)
from formatswap.converters.image import image_converter
from formatswap.converters.media import media_converter
from formatswap.formats import (
    AUDIO_FORMATS,
    IMAGE_FORMATS,
    VIDEO_FORMATS,
    canonicalize,
)


def _image_row(source: str) -> dict[str, Converter]:
    return {target: image_converter(target) for target in IMAGE_FORMATS if target != source}


def _video_row(source: str) -> dict[str, Converter]:
    targets = [t for t in VIDEO_FORMATS if t != source] + ["MP3", "WAV"]
    return {target: media_converter(source, target) for target in targets}


def _audio_row(source: str) -> dict[str, Converter]:
    return {
        target: media_converter(source, target)
        for target in AUDIO_FORMATS
        if target != source
    }


_TABLE: dict[str, dict[str, Converter]] = {
    "TXT": {
        "HTML": text.txt_to_html,
        "JSON": text.txt_to_json,
        "CSV": text.txt_to_csv,
        "XML": text.txt_to_xml,
        "MD": text.txt_to_md,
        "PDF": documents.txt_to_pdf,
        "DOCX": documents.txt_to_docx,
    },
    "JSON": {
        "CSV": structured.json_to_csv,
        "TSV": structured.json_to_tsv,
        "XML": structured.json_to_xml,
        "TXT": structured.json_to_txt,
        "MD": structured.json_to_md,
        "XLSX": xlsx.json_to_xlsx,
    },
    "CSV": {
        "JSON": structured.csv_to_json,
        "TSV": structured.csv_to_tsv,
        "XML": structured.csv_to_xml,
        "TXT": structured.csv_to_txt,
        "MD": structured.csv_to_md,
        "XLSX": xlsx.csv_to_xlsx,
    },
    "XML": {
        "JSON": structured.xml_to_json,
        "CSV": structured.xml_to_csv,
        "TSV": structured.xml_to_tsv,
        "TXT": structured.xml_to_txt,
        "MD": structured.xml_to_md,
    },
    "HTML": {
        "TXT": text.html_to_txt,
        "MD": text.html_to_md,
        "PDF": documents.html_to_pdf,
        "DOCX": documents.html_to_docx,
    },
    "TSV": {
        "CSV": structured.tsv_to_csv,
        "JSON": structured.tsv_to_json,
        "XML": structured.tsv_to_xml,
        "TXT": structured.tsv_to_txt,
        "MD": structured.tsv_to_md,
    },
    "MD": {
        "HTML": text.md_to_html,
        "TXT": text.md_to_txt,
    },
    "PDF": {
        "TXT": pdf.pdf_to_txt,
        "HTML": pdf.pdf_to_html,
        "DOCX": pdf.pdf_to_docx,
        "MD": pdf.pdf_to_md,
    },
    "DOCX": {
        "HTML": docx.docx_to_html,
        "TXT": docx.docx_to_txt,
        "MD": docx.docx_to_md,
        "PDF": docx.docx_to_pdf,
    },
    "XLSX": {
        "CSV": xlsx.xlsx_to_csv,
        "JSON": xlsx.xlsx_to_json,
        "MD": xlsx.xlsx_to_md,
    },
    **{source: _image_row(source) for source in IMAGE_FORMATS},
    **{source: _video_row(source) for source in VIDEO_FORMATS},
    **{source: _audio_row(source) for source in AUDIO_FORMATS},
}

# Source tag -> target tag -> converter, in declared order; read-only
CONVERTER_REGISTRY: Mapping[str, Mapping[str, Converter]] = MappingProxyType(
    {source: MappingProxyType(row) for source, row in _TABLE.items()}
)


def get_converter(source: str, target: str) -> Converter | None:
    """Look up the converter for a format pair.

    Only the source tag is canonicalized; the target must match a
    registered tag exactly.

    Args:
        source: Source format name.
        target: Target format tag.

    Returns:
        The converter, or None when the pair is not registered.
    """
    return CONVERTER_REGISTRY.get(canonicalize(source), {}).get(target)


def list_targets(source: str) -> list[str]:
    """Get the registered targets for a source format, in declared order."""
    return list(CONVERTER_REGISTRY.get(canonicalize(source), {}))


def get_supported_sources() -> list[str]:
    """Get every source format with at least one registered target."""
    return list(CONVERTER_REGISTRY)


__all__ = [
    "ConversionContext",
    "ConversionResult",
    "Converter",
    "ProgressCallback",
    "CONVERTER_REGISTRY",
    "get_converter",
    "list_targets",
    "get_supported_sources",
]
