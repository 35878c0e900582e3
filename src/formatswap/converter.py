"""File-level driver: read files, convert them, write the outputs."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from formatswap.errors import ConversionError
from formatswap.formats import tag_from_filename
from formatswap.orchestrator import ConversionService, default_service
from formatswap.utils.file_utils import discover_files, get_output_path

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Outcome of converting one file."""

    source_path: Path
    target: str
    success: bool
    output_path: Path | None = None
    size: int = 0
    error: str | None = None
    can_retry: bool = False


class FileConverter:
    """Converts files on disk through the conversion service."""

    def __init__(
        self,
        output_dir: Path | None = None,
        max_workers: int | None = None,
        service: ConversionService | None = None,
    ):
        """Initialize the converter.

        Args:
            output_dir: Directory to write output files. None = same as source.
            max_workers: Maximum number of parallel conversion threads.
                Defaults to the service's configured worker count.
            service: Conversion service to use. Defaults to the shared one.
        """
        self.output_dir = output_dir
        self.service = service or default_service()
        self.max_workers = max_workers or self.service.settings.max_workers

    def convert_and_save(
        self,
        file_path: Path,
        target: str,
        source_base: Path | None = None,
    ) -> FileResult:
        """Convert a file and save the output next to it or in output_dir.

        Args:
            file_path: Path to the file to convert.
            target: Target format tag.
            source_base: Base directory for preserving relative paths.

        Returns:
            FileResult with output_path set if successful.
        """
        source = tag_from_filename(file_path)

        try:
            payload = file_path.read_bytes()
            result = self.service.request_conversion(payload, source, target)
        except ConversionError as e:
            return FileResult(
                source_path=file_path,
                target=target,
                success=False,
                error=e.info.display_text,
                can_retry=e.info.can_retry,
            )
        except OSError as e:
            return FileResult(
                source_path=file_path,
                target=target,
                success=False,
                error=f"Could not read file: {e}",
            )

        output_path = get_output_path(file_path, target, self.output_dir, source_base)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.data)
        logger.debug("Wrote %s (%d bytes)", output_path, result.size)

        return FileResult(
            source_path=file_path,
            target=target,
            success=True,
            output_path=output_path,
            size=result.size,
        )

    def convert_batch(
        self,
        paths: list[Path],
        target: str,
        recursive: bool = False,
        formats: list[str] | None = None,
        dry_run: bool = False,
    ) -> list[FileResult]:
        """Convert multiple files or directories to one target format.

        Each file is an independent conversion job.

        Args:
            paths: List of file or directory paths to convert.
            target: Target format tag.
            recursive: Whether to search directories recursively.
            formats: Optional list of source formats to filter by.
            dry_run: If True, only return what would be converted.

        Returns:
            List of FileResults sorted by file name.
        """
        files = discover_files(paths, recursive=recursive, formats=formats)

        if not files:
            return []

        # Determine source base for preserving directory structure
        source_base = None
        if len(paths) == 1 and paths[0].is_dir():
            source_base = paths[0]

        if dry_run:
            results: list[FileResult] = []
            for file_path in files:
                output_path = get_output_path(file_path, target, self.output_dir, source_base)
                results.append(FileResult(
                    source_path=file_path,
                    target=target,
                    success=True,
                    output_path=output_path,
                ))
            return results

        results = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self.convert_and_save, f, target, source_base): f
                for f in files
            }

            for future in as_completed(future_to_file):
                results.append(future.result())

        # Sort results by filename for consistent output
        results.sort(key=lambda r: r.source_path.name.lower())

        return results
