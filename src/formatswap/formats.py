"""Format tags, aliases and MIME types."""

from pathlib import PurePath

# Aliases applied after uppercasing
FORMAT_ALIASES: dict[str, str] = {
    "JPEG": "JPG",
    "HTM": "HTML",
}

IMAGE_FORMATS = ("JPG", "PNG", "WEBP", "BMP", "ICO", "GIF")
VIDEO_FORMATS = ("MP4", "WEBM", "AVI", "MOV", "MKV")
AUDIO_FORMATS = ("MP3", "WAV", "OGG", "FLAC", "AAC", "M4A")
DOCUMENT_FORMATS = ("PDF", "DOCX", "XLSX")
TEXT_FORMATS = ("TXT", "JSON", "CSV", "XML", "HTML", "TSV", "MD")

MIME_TYPES: dict[str, str] = {
    "TXT": "text/plain",
    "JSON": "application/json",
    "CSV": "text/csv",
    "TSV": "text/tab-separated-values",
    "XML": "application/xml",
    "HTML": "text/html",
    "MD": "text/markdown",
    "PDF": "application/pdf",
    "DOCX": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "XLSX": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "JPG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
    "ICO": "image/x-icon",
    "GIF": "image/gif",
    "MP4": "video/mp4",
    "WEBM": "video/webm",
    "AVI": "video/x-msvideo",
    "MOV": "video/quicktime",
    "MKV": "video/x-matroska",
    "MP3": "audio/mpeg",
    "WAV": "audio/wav",
    "OGG": "audio/ogg",
    "FLAC": "audio/flac",
    "AAC": "audio/aac",
    "M4A": "audio/mp4",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def canonicalize(raw: str) -> str:
    """Normalize a format name to its canonical tag.

    Uppercases the input and applies the alias table. Any string maps to
    some tag, registered or not, and applying it twice changes nothing.

    Args:
        raw: Format name as typed by a user or taken from a file suffix.

    Returns:
        The canonical format tag.
    """
    tag = raw.upper()
    return FORMAT_ALIASES.get(tag, tag)


def is_image_format(tag: str) -> bool:
    """Check whether a tag belongs to the raster image family."""
    return canonicalize(tag) in IMAGE_FORMATS


def mime_type_for(tag: str) -> str:
    """Get the MIME type for a format tag."""
    return MIME_TYPES.get(canonicalize(tag), DEFAULT_MIME_TYPE)


def tag_from_filename(name: str | PurePath) -> str:
    """Derive a canonical format tag from a file name's suffix."""
    return canonicalize(PurePath(name).suffix.lstrip("."))


def extension_for(tag: str) -> str:
    """Get the file extension (with dot) used when writing a format."""
    return "." + canonicalize(tag).lower()


def compatible_outputs(input_tag: str) -> list[str]:
    """List the target formats registered for an input format.

    Args:
        input_tag: Source format name, canonicalized before lookup.

    Returns:
        Target tags in the registry's declared order. Empty when the
        source format has no known conversions.
    """
    from formatswap.converters import list_targets

    return list_targets(input_tag)
