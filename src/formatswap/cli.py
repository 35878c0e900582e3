"""Click CLI interface for FormatSwap."""

import logging
from pathlib import Path

import click

from formatswap import __version__
from formatswap.converter import FileConverter
from formatswap.converters import get_supported_sources
from formatswap.formats import FORMAT_ALIASES, canonicalize
from formatswap.orchestrator import list_compatible_targets

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

_SOURCES = get_supported_sources()
SOURCE_CHOICES = sorted(
    [tag.lower() for tag in _SOURCES]
    + [alias.lower() for alias, tag in FORMAT_ALIASES.items() if tag in _SOURCES]
)


def setup_logging(verbose: bool) -> None:
    """Send formatswap logs to stderr."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("formatswap")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name="formatswap")
def main():
    """FormatSwap - Convert files between formats.

    Handles text and data (TXT, JSON, CSV, TSV, XML, HTML, MD),
    documents (PDF, DOCX, XLSX), images (JPG, PNG, WEBP, BMP, ICO, GIF),
    video (MP4, WEBM, AVI, MOV, MKV) and audio
    (MP3, WAV, OGG, FLAC, AAC, M4A).
    """
    pass


@main.command()
@click.argument("source")
def formats(source: str):
    """List the formats SOURCE can be converted to.

    \b
    Examples:
        formatswap formats csv
        formatswap formats jpeg
    """
    targets = list_compatible_targets(source)
    if not targets:
        click.echo(f"No conversions available for {canonicalize(source)}.")
        return

    for target in targets:
        click.echo(target)


@main.command()
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "-t", "--to",
    "target",
    required=True,
    help="Target format, e.g. json, pdf, png.",
)
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory for converted files. Default: same as source.",
)
@click.option(
    "-r", "--recursive",
    is_flag=True,
    help="Recursively process directories.",
)
@click.option(
    "-f", "--format",
    "formats",
    multiple=True,
    type=click.Choice(SOURCE_CHOICES, case_sensitive=False),
    help="Only convert specific source formats. Can be specified multiple times.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be converted without actually converting.",
)
@click.option(
    "-w", "--workers",
    type=int,
    default=None,
    help="Number of parallel workers for batch conversion.",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Log conversion steps to stderr.",
)
def convert(
    paths: tuple[str, ...],
    target: str,
    output: Path | None,
    recursive: bool,
    formats: tuple[str, ...],
    dry_run: bool,
    workers: int | None,
    verbose: bool,
):
    """Convert files to another format.

    PATHS can be files or directories. Multiple paths can be specified.

    \b
    Examples:
        formatswap convert data.csv --to json
        formatswap convert report.docx notes.txt --to pdf -o ./out/
        formatswap convert ./photos/ -r --to webp
        formatswap convert ./data/ -f csv -f tsv --to json
        formatswap convert ./clips/ --to mp3 --dry-run
    """
    setup_logging(verbose)
    target = canonicalize(target)

    path_list: list[Path] = []
    for p in paths:
        path = Path(p)
        if not path.exists():
            raise click.BadParameter(
                f"Path '{p}' does not exist.", param_hint="'PATHS'"
            )
        path_list.append(path)

    converter = FileConverter(output_dir=output, max_workers=workers)
    results = converter.convert_batch(
        path_list,
        target,
        recursive=recursive,
        formats=list(formats) if formats else None,
        dry_run=dry_run,
    )

    if not results:
        click.echo("No files found to convert.")
        return

    success_count = 0
    error_count = 0

    if dry_run:
        click.echo("Dry run - files that would be converted:\n")

    for result in results:
        if result.success:
            success_count += 1
            if dry_run:
                click.echo(f"  {result.source_path}")
                click.echo(f"    -> {result.output_path}")
            else:
                click.echo(f"[OK] {result.source_path.name} -> {result.output_path}")
        else:
            error_count += 1
            click.echo(f"[ERROR] {result.source_path.name}: {result.error}", err=True)

    # Summary
    click.echo()
    if dry_run:
        click.echo(f"Would convert {success_count} file(s).")
    else:
        click.echo(f"Converted {success_count} file(s), {error_count} error(s).")


if __name__ == "__main__":
    main()
