"""Convert JPEG/PNG images to WebP and register every WebP file in the metadata."""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger
from PIL import Image

from image_set.metadata_store import MetadataStore
from image_set.scanner import relative_key
from image_set.settings import DEFAULT_WEBP_QUALITY, PROCESSED_EXTENSION, UNPROCESSED_EXTENSIONS


@dataclass
class CompressionReport:
    """Outcome of one compression run."""

    converted: list[str] = field(default_factory=list)
    registered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed_directories: list[str] = field(default_factory=list)


def convert_to_webp(source: Path, output: Path, quality: int = DEFAULT_WEBP_QUALITY) -> None:
    """Transcode `source` into a WebP file at `output`."""
    with Image.open(source) as img:
        img.save(output, format="WEBP", quality=quality)


def compress_images(
    root: Path,
    metadata: MetadataStore,
    directory: Path | None = None,
    *,
    quality: int = DEFAULT_WEBP_QUALITY,
    report: CompressionReport | None = None,
) -> CompressionReport:
    """
    Compress the images below `directory` and register their metadata.

    - WebP files without a record get an empty one.
    - JPEG/PNG files whose WebP output has no record yet are converted next to
      the source, the source is deleted and the output gets an empty record.
    - Anything else is skipped.

    An error aborts the remaining files of the directory being processed, is
    logged, and the walk continues with the next directory.

    Args:
        root: Image root; metadata keys are relative to it.
        metadata: Store receiving the new records (not saved here).
        directory: Directory to process, defaults to `root`.
        quality: WebP quality (1-100).
        report: Accumulator shared by the recursive calls.

    Returns:
        The report of converted, registered and skipped files.

    """
    report = report if report is not None else CompressionReport()
    current = directory or root

    try:
        for entry in sorted(current.iterdir()):
            if entry.is_dir():
                compress_images(root, metadata, entry, quality=quality, report=report)
            elif entry.is_file():
                _process_file(root, metadata, entry, quality=quality, report=report)
    except Exception as exc:  # noqa: BLE001
        logger.exception("directory_processing_failed", directory=str(current), error=str(exc))
        report.failed_directories.append(str(current))

    return report


def _process_file(
    root: Path,
    metadata: MetadataStore,
    path: Path,
    *,
    quality: int,
    report: CompressionReport,
) -> None:
    relative_path = relative_key(root, path)
    ext = path.suffix.lower()

    if ext == PROCESSED_EXTENSION:
        if metadata.get(relative_path) is None:
            logger.info("registering_existing_webp", file=relative_path)
            metadata.upsert(relative_path, [], "")
            report.registered.append(relative_path)
        else:
            logger.debug("skipping_webp_with_metadata", file=relative_path)
            report.skipped.append(relative_path)
        return

    output_path = path.with_suffix(PROCESSED_EXTENSION)
    output_relative = relative_key(root, output_path)
    if ext in UNPROCESSED_EXTENSIONS and metadata.get(output_relative) is None:
        logger.info("compressing_image", file=relative_path, quality=quality)
        convert_to_webp(path, output_path, quality)
        path.unlink()
        metadata.upsert(output_relative, [], "")
        logger.info("image_compressed", source=relative_path, output=output_relative)
        report.converted.append(output_relative)
        return

    logger.debug("skipping_file", file=relative_path, reason="processed_or_unsupported")
    report.skipped.append(relative_path)
