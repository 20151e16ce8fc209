"""Inventory of processed (WebP) images below an image root."""

from pathlib import Path

from loguru import logger

from image_set.settings import PROCESSED_EXTENSION


def relative_key(root: Path, path: Path) -> str:
    """
    Return the metadata key for `path`: its POSIX path relative to `root`.

    Examples:
        >>> relative_key(Path("/img"), Path("/img/trips/a.webp"))
        'trips/a.webp'

    """
    return path.relative_to(root).as_posix()


def scan_images(root: Path, directory: Path | None = None) -> list[str]:
    """
    Recursively list the processed images under `directory`.

    Args:
        root: Image root; returned paths are relative to it.
        directory: Directory to walk, defaults to `root`.

    Returns:
        Relative POSIX paths of files whose extension is `.webp` (any case),
        depth first, entries visited in name order.

    """
    current = directory or root
    if not current.is_dir():
        logger.warning("image_directory_missing", directory=str(current))
        return []

    results: list[str] = []
    for entry in sorted(current.iterdir()):
        if entry.is_dir():
            results.extend(scan_images(root, entry))
        elif entry.is_file() and entry.suffix.lower() == PROCESSED_EXTENSION:
            results.append(relative_key(root, entry))
    return results
