"""Runtime settings read from the environment."""

import logging
import math
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Settings shared by the codec engine and batch conversion."""

    ffmpeg_binary: str = "ffmpeg"
    codec_timeout: float | None = None
    max_workers: int = 4


def _positive_env(name: str, parse, default):
    """Read a positive number, keeping the default for blank or bad values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = parse(raw.strip())
    except ValueError:
        value = None

    if value is None or not math.isfinite(value) or value <= 0:
        logger.warning("Ignoring invalid %s=%r; using %r", name, raw, default)
        return default
    return value


def load_settings() -> Settings:
    """Build Settings from FORMATSWAP_* environment variables.

    Malformed or non-positive numbers are logged and replaced by the
    defaults, so a bad environment never stops a conversion.
    """
    defaults = Settings()
    return Settings(
        ffmpeg_binary=os.getenv("FORMATSWAP_FFMPEG_BINARY") or defaults.ffmpeg_binary,
        codec_timeout=_positive_env("FORMATSWAP_CODEC_TIMEOUT", float, defaults.codec_timeout),
        max_workers=_positive_env("FORMATSWAP_MAX_WORKERS", int, defaults.max_workers),
    )
