"""Audio and video re-encoding through the FFmpeg codec engine."""

import logging
import subprocess
from typing import Any

from formatswap.converters.base import ConversionContext, ConversionResult, Converter
from formatswap.errors import CodecError
from formatswap.formats import extension_for, mime_type_for

logger = logging.getLogger(__name__)

INPUT_STEM = "input"
OUTPUT_STEM = "output"

# Default codec and bitrate policy per target format
CODEC_PROFILES: dict[str, dict[str, Any]] = {
    "MP4": {"vcodec": "libx264", "preset": "fast", "crf": 23, "acodec": "aac", "audio_bitrate": "192k"},
    "MOV": {"vcodec": "libx264", "preset": "fast", "crf": 23, "acodec": "aac", "audio_bitrate": "192k"},
    "MKV": {"vcodec": "libx264", "preset": "fast", "crf": 23, "acodec": "aac", "audio_bitrate": "192k"},
    "WEBM": {"vcodec": "libvpx-vp9", "crf": 32, "video_bitrate": 0, "acodec": "libopus", "audio_bitrate": "128k"},
    "AVI": {"vcodec": "mpeg4", "qscale:v": 3, "acodec": "libmp3lame", "audio_bitrate": "192k"},
    # Audio targets drop any video stream
    "MP3": {"vn": None, "acodec": "libmp3lame", "audio_bitrate": "192k"},
    "WAV": {"vn": None, "acodec": "pcm_s16le"},
    "OGG": {"vn": None, "acodec": "libvorbis", "audio_bitrate": "192k"},
    "FLAC": {"vn": None, "acodec": "flac"},
    "AAC": {"vn": None, "acodec": "aac", "audio_bitrate": "192k"},
    "M4A": {"vn": None, "acodec": "aac", "audio_bitrate": "192k"},
}


def transcode(payload: bytes, source: str, target: str, context: ConversionContext) -> ConversionResult:
    """Re-encode audio or video with the shared codec engine.

    The engine is loaded on first use. The input is written to a fixed
    workspace name, re-encoded with the target's codec profile and read
    back; both workspace entries are deleted whether or not ffmpeg
    succeeds.

    Args:
        payload: Source media bytes.
        source: Source format tag (picks the input file extension).
        target: Target format tag, one of CODEC_PROFILES.
        context: Supplies the codec engine handle.

    Returns:
        ConversionResult with the re-encoded media.

    Raises:
        CodecEngineUnavailableError: If the engine cannot be loaded.
        CodecError: If ffmpeg fails; its diagnostics are only logged.
    """
    import ffmpeg

    engine = context.engine.get()
    input_name = INPUT_STEM + extension_for(source)
    output_name = OUTPUT_STEM + extension_for(target)

    with engine.session():
        try:
            engine.write_file(input_name, payload)
            engine.execute(input_name, output_name, CODEC_PROFILES[target])
            data = engine.read_file(output_name)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            logger.debug("ffmpeg failed converting %s to %s: %s", source, target, stderr)
            raise CodecError(target) from e
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("ffmpeg failed converting %s to %s: %s", source, target, e)
            raise CodecError(target) from e
        finally:
            engine.delete_file(input_name)
            engine.delete_file(output_name)

    return ConversionResult(data=data, mime_type=mime_type_for(target))


def media_converter(source: str, target: str) -> Converter:
    """Build the registry entry that re-encodes source media as target."""

    def convert(payload: bytes, context: ConversionContext) -> ConversionResult:
        return transcode(payload, source, target, context)

    convert.__name__ = f"{source.lower()}_to_{target.lower()}"
    return convert
