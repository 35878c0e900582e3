"""Lazily loaded FFmpeg codec engine."""

import logging
import shutil
import subprocess
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from formatswap.config import Settings, load_settings
from formatswap.errors import CodecEngineUnavailableError

logger = logging.getLogger(__name__)


class CodecEngine:
    """FFmpeg wrapper working inside a private scratch directory.

    The scratch directory plays the part of the engine's virtual file
    system: callers write named inputs into it, run a command, read the
    named output back and delete both entries.
    """

    def __init__(self, binary: str, timeout: float | None = None):
        """Initialize the engine.

        Args:
            binary: Resolved path of the ffmpeg executable.
            timeout: Seconds before a running command is killed. None = no deadline.
        """
        self.binary = binary
        self.timeout = timeout
        self._workspace = tempfile.TemporaryDirectory(prefix="formatswap-")
        self._lock = threading.Lock()

    @classmethod
    def load(cls, settings: Settings) -> "CodecEngine":
        """Locate ffmpeg and check that it starts.

        Args:
            settings: Settings naming the binary and command timeout.

        Returns:
            A ready CodecEngine.

        Raises:
            CodecEngineUnavailableError: If ffmpeg is missing or broken.
        """
        binary = shutil.which(settings.ffmpeg_binary)
        if binary is None:
            raise CodecEngineUnavailableError(
                f"FFmpeg executable '{settings.ffmpeg_binary}' was not found."
            )

        try:
            subprocess.run(
                [binary, "-version"],
                check=True,
                capture_output=True,
                timeout=30,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise CodecEngineUnavailableError(f"FFmpeg failed to start: {e}") from e

        return cls(binary, timeout=settings.codec_timeout)

    @property
    def workspace(self) -> Path:
        return Path(self._workspace.name)

    @contextmanager
    def session(self) -> Iterator["CodecEngine"]:
        """Hold the engine for one write/execute/read/delete sequence."""
        with self._lock:
            yield self

    def write_file(self, name: str, data: bytes) -> None:
        (self.workspace / name).write_bytes(data)

    def read_file(self, name: str) -> bytes:
        return (self.workspace / name).read_bytes()

    def delete_file(self, name: str) -> None:
        (self.workspace / name).unlink(missing_ok=True)

    def execute(self, input_name: str, output_name: str, options: dict[str, Any]) -> None:
        """Run one re-encode command between two workspace entries.

        Args:
            input_name: Workspace entry to read.
            output_name: Workspace entry to write; its extension picks the container.
            options: ffmpeg-python output keyword arguments (codecs, bitrates).

        Raises:
            ffmpeg.Error: If ffmpeg exits with a non-zero status.
            subprocess.TimeoutExpired: If the command outlives the timeout.
        """
        import ffmpeg

        stream = ffmpeg.input(str(self.workspace / input_name))
        stream = ffmpeg.output(stream, str(self.workspace / output_name), **options)

        process = ffmpeg.run_async(
            stream,
            cmd=self.binary,
            quiet=True,
            overwrite_output=True,
        )
        try:
            out, err = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
            raise

        if process.returncode != 0:
            raise ffmpeg.Error(self.binary, out, err)

    def close(self) -> None:
        """Remove the scratch directory."""
        self._workspace.cleanup()


class CodecEngineHandle:
    """Load-once holder for a CodecEngine.

    The first caller loads the engine while concurrent callers wait for
    that single load. A failed load leaves the handle empty, so a later
    conversion may try again.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        loader: Callable[[Settings], CodecEngine] = CodecEngine.load,
    ):
        self._settings = settings
        self._loader = loader
        self._engine: CodecEngine | None = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._engine is not None

    def get(self) -> CodecEngine:
        """Return the engine, loading it on first use."""
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is None:
                settings = self._settings or load_settings()
                logger.info("Loading codec engine (%s)", settings.ffmpeg_binary)
                self._engine = self._loader(settings)
            return self._engine

    def close(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.close()
                self._engine = None
