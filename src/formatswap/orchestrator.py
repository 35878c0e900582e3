"""Conversion orchestration: validate, dispatch, execute, finalize."""

import logging
import threading
from enum import Enum

from formatswap.classifier import classify_error
from formatswap.config import Settings, load_settings
from formatswap.converters import ConversionContext, ConversionResult, Converter, get_converter
from formatswap.converters.base import ProgressCallback
from formatswap.engine import CodecEngineHandle
from formatswap.errors import (
    ConversionError,
    EmptyOutputError,
    ErrorInfo,
    UnsupportedConversionError,
)
from formatswap.formats import canonicalize, compatible_outputs, is_image_format

logger = logging.getLogger(__name__)

# Progress milestones
PROGRESS_VALIDATED = 10
PROGRESS_BEFORE_CONVERT = 50
PROGRESS_AFTER_CONVERT = 75
PROGRESS_VERIFIED = 90
PROGRESS_DONE = 100


class ConversionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    EXECUTING = "executing"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProgressTracker:
    """Forward progress clamped to [0, 100], dropping values that do not advance."""

    def __init__(self, callback: ProgressCallback | None = None):
        self._callback = callback
        self.value = 0

    def __call__(self, percent: int) -> None:
        value = min(100, max(0, int(percent)))
        if value <= self.value:
            return
        self.value = value
        if self._callback is not None:
            self._callback(value)


class ConversionJob:
    """A single conversion run.

    A job moves Idle -> Validating -> Dispatching -> Executing ->
    Finalizing and ends in Succeeded or Failed. Jobs are not reusable:
    retrying means creating a new job.
    """

    def __init__(
        self,
        payload: bytes,
        source: str,
        target: str,
        on_progress: ProgressCallback | None = None,
        engine: CodecEngineHandle | None = None,
    ):
        """Initialize the job.

        Args:
            payload: Full input file contents.
            source: Source format name; canonicalized.
            target: Target format tag; used as given.
            on_progress: Optional callback receiving percentages.
            engine: Shared codec engine handle for audio/video conversions.
        """
        self.payload = payload
        self.source = canonicalize(source)
        self.target = target
        self.state = ConversionState.IDLE
        self.result: ConversionResult | None = None
        self.error: ErrorInfo | None = None
        self._progress = ProgressTracker(on_progress)
        self._engine = engine or CodecEngineHandle()

    @property
    def progress(self) -> int:
        return self._progress.value

    def run(self) -> ConversionResult:
        """Run the job to completion.

        Returns:
            The non-empty conversion result.

        Raises:
            ConversionError: On any failure, carrying the classified ErrorInfo.
        """
        if self.state is not ConversionState.IDLE:
            raise RuntimeError("A conversion job can only run once; create a new job to retry.")

        try:
            converter = self._validate()
            self._dispatch()
            result = self._execute(converter)
            return self._finalize(result)
        except Exception as e:
            info = classify_error(e)
            self.error = info
            self._transition(ConversionState.FAILED)
            logger.warning(
                "Conversion %s -> %s failed (%s): %s",
                self.source, self.target, info.category.value, e,
            )
            raise ConversionError(info) from e

    def _transition(self, state: ConversionState) -> None:
        logger.debug("Conversion %s -> %s: %s", self.source, self.target, state.value)
        self.state = state

    def _validate(self) -> Converter:
        self._transition(ConversionState.VALIDATING)
        converter = get_converter(self.source, self.target)
        if converter is None:
            raise UnsupportedConversionError(self.source, self.target)
        return converter

    def _dispatch(self) -> None:
        self._transition(ConversionState.DISPATCHING)
        self._progress(PROGRESS_VALIDATED)

    def _execute(self, converter: Converter) -> ConversionResult:
        self._transition(ConversionState.EXECUTING)
        context = ConversionContext(on_progress=self._progress, engine=self._engine)

        # Only image converters report their own progress
        if is_image_format(self.source):
            return converter(self.payload, context)

        self._progress(PROGRESS_BEFORE_CONVERT)
        result = converter(self.payload, context)
        self._progress(PROGRESS_AFTER_CONVERT)
        return result

    def _finalize(self, result: ConversionResult | None) -> ConversionResult:
        self._transition(ConversionState.FINALIZING)
        if result is None or result.size == 0:
            raise EmptyOutputError()

        self._progress(PROGRESS_VERIFIED)
        self._progress(PROGRESS_DONE)
        self.result = result
        self._transition(ConversionState.SUCCEEDED)
        return result


class ConversionService:
    """Long-lived owner of settings and the shared codec engine handle."""

    def __init__(
        self,
        settings: Settings | None = None,
        engine: CodecEngineHandle | None = None,
    ):
        self.settings = settings or load_settings()
        self.engine = engine or CodecEngineHandle(self.settings)

    def request_conversion(
        self,
        payload: bytes,
        source: str,
        target: str,
        on_progress: ProgressCallback | None = None,
    ) -> ConversionResult:
        """Convert a payload from source to target format.

        Args:
            payload: Full input file contents.
            source: Source format name (aliases such as JPEG are accepted).
            target: Target format tag, as returned by list_compatible_targets.
            on_progress: Optional callback receiving non-decreasing percentages.

        Returns:
            ConversionResult with a non-empty payload and its MIME type.

        Raises:
            ConversionError: Carrying category, message, suggestion and retry flag.
        """
        job = ConversionJob(payload, source, target, on_progress, engine=self.engine)
        return job.run()

    def list_compatible_targets(self, source: str) -> list[str]:
        return compatible_outputs(source)

    def close(self) -> None:
        self.engine.close()


_default_service: ConversionService | None = None
_default_lock = threading.Lock()


def default_service() -> ConversionService:
    """Get the process-wide service used by the module-level functions."""
    global _default_service
    with _default_lock:
        if _default_service is None:
            _default_service = ConversionService()
        return _default_service


def request_conversion(
    payload: bytes,
    source: str,
    target: str,
    on_progress: ProgressCallback | None = None,
    service: ConversionService | None = None,
) -> ConversionResult:
    """Convert a payload from source to target format.

    See ConversionService.request_conversion.
    """
    service = service or default_service()
    return service.request_conversion(payload, source, target, on_progress)


def list_compatible_targets(source: str) -> list[str]:
    """List the target formats available for a source format.

    Unknown formats yield an empty list rather than an error.
    """
    return compatible_outputs(source)
