"""File discovery and path utilities."""

from pathlib import Path

from formatswap.converters import get_supported_sources
from formatswap.formats import FORMAT_ALIASES, canonicalize, extension_for


def source_extensions(formats: list[str] | None = None) -> set[str]:
    """Get every file suffix that maps to a registered source format.

    Args:
        formats: Optional source formats to restrict to; aliases are accepted.
    """
    sources = set(get_supported_sources())
    if formats:
        sources &= {canonicalize(fmt.lstrip(".")) for fmt in formats}
    extensions = {extension_for(tag) for tag in sources}
    extensions.update(
        f".{alias.lower()}" for alias, tag in FORMAT_ALIASES.items() if tag in sources
    )
    return extensions


def discover_files(
    paths: list[Path],
    recursive: bool = False,
    formats: list[str] | None = None,
) -> list[Path]:
    """Discover all convertible files from the given paths.

    Args:
        paths: List of file or directory paths.
        recursive: Whether to search directories recursively.
        formats: Optional source formats to filter by (e.g., ["csv", "jpeg"]).

    Returns:
        List of file paths to convert.
    """
    extensions = source_extensions(formats)

    discovered: list[Path] = []

    for path in paths:
        if path.is_file():
            if path.suffix.lower() in extensions:
                discovered.append(path)
        elif path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            discovered.extend(
                p for p in candidates
                if p.is_file() and p.suffix.lower() in extensions
            )

    # Remove duplicates and sort
    seen: set[Path] = set()
    unique: list[Path] = []
    for p in discovered:
        resolved = p.resolve()
        if resolved not in seen:
            seen.add(resolved)
            unique.append(p)

    return sorted(unique, key=lambda p: p.name.lower())


def get_output_path(
    source_path: Path,
    target: str,
    output_dir: Path | None = None,
    source_base: Path | None = None,
) -> Path:
    """Get the output path for a converted file.

    Args:
        source_path: Path to the source file.
        target: Target format tag; picks the new extension.
        output_dir: Optional output directory. If None, uses source directory.
        source_base: Base directory for preserving relative paths in batch mode.

    Returns:
        Path for the output file.
    """
    output_name = source_path.stem + extension_for(target)

    if output_dir is None:
        return source_path.parent / output_name

    # If source_base is provided, preserve relative directory structure
    if source_base is not None:
        try:
            relative = source_path.parent.relative_to(source_base)
            target_dir = output_dir / relative
        except ValueError:
            target_dir = output_dir
    else:
        target_dir = output_dir

    return target_dir / output_name
