#!/usr/bin/env python3
"""
Image Set: CLI to compress, tag and check a WebP image set.

The image set is a directory of images (`public/images`) plus two JSON files:
per-image metadata (`data/image-metadata.json`) and the tag taxonomy
(`data/tag-config.json`). Running without arguments opens an interactive menu;
`--compress-only` converts JPEG/PNG files to WebP, registers them and exits.

Requirements:
 - Pillow built with WebP support.
"""
# ruff: noqa: PLR0913

import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import App, Parameter, validators
from loguru import logger

from image_set import prompts
from image_set.compression import compress_images
from image_set.library import ImageSet
from image_set.metadata_store import MetadataStore
from image_set.models import Tag
from image_set.prompts import Choice
from image_set.publish import publish as publish_release
from image_set.publish import published_version, read_project
from image_set.scanner import scan_images
from image_set.settings import DEFAULT_ROOT, DEFAULT_WEBP_QUALITY, ImageSetPaths
from image_set.tag_store import TagStore


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "OFF"]

RootOption = Annotated[
    Path,
    Parameter(
        name=("--root",),
        validator=validators.Path(exists=True, file_okay=False),
        help="Image set root (holds public/images and data/). Defaults to $IMAGE_SET_ROOT or '.'",
    ),
]
ConsoleLogLevel = Annotated[
    LogLevel,
    Parameter(name="--console-log-level", help="Log level for console (use 'OFF' to disable)"),
]
FileLogLevel = Annotated[
    LogLevel,
    Parameter(name="--file-log-level", help="Log level for file (use 'OFF' to disable)"),
]
LogFolder = Annotated[
    Path,
    Parameter(name=("--log-folder",), help="Folder where log files are stored"),
]


# Cyclopts app
__version__ = "0.1.0"
app = App(
    name="image-set",
    version=__version__,
)


def setup_logging(
    file_log_level: LogLevel = "OFF",
    console_log_level: LogLevel = "INFO",
    log_folder: Path = Path("logs"),
) -> None:
    """
    Configure Loguru for both console and file logging.

    Args:
        file_log_level: Log level for file (use 'OFF' to disable)
        console_log_level: Log level for console (use 'OFF' to disable)
        log_folder: Directory where log files are stored

    """
    logger.remove()

    if file_log_level != "OFF":
        log_folder.mkdir(parents=True, exist_ok=True)
        log_file = log_folder / Path(
            datetime.now(tz=UTC).strftime("%Y%m%d%H%M%S-image_set.log"),
        )
        logger.add(
            log_file,
            level=file_log_level,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{name:<8}:{function:<25}:{line:>4} | "
                "{message:<40} | "
                "{extra}"
            ),
            rotation="50 MB",
            retention="10 days",
            compression="zip",
        )

    if console_log_level != "OFF":
        logger.add(
            sys.stderr,
            level=console_log_level,
            colorize=True,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <7}</level> | "
                "<level>{message:<32}</level> | "
                "<yellow>{extra}</yellow>"
            ),
        )


@dataclass
class Session:
    """Both stores of an image set, loaded together and saved together."""

    paths: ImageSetPaths
    tags: TagStore
    metadata: MetadataStore

    @classmethod
    def open(cls, paths: ImageSetPaths) -> "Session":
        """Load both stores, creating missing files, and migrate legacy metadata."""
        session = cls(
            paths=paths,
            tags=TagStore(paths.tag_config_file),
            metadata=MetadataStore(paths.metadata_file),
        )
        session.metadata.load()
        session.tags.load()
        session.metadata.migrate_legacy_tags()
        return session

    def save(self) -> None:
        self.metadata.save()
        self.tags.save()

    def compress(self, quality: int = DEFAULT_WEBP_QUALITY) -> None:
        self.paths.images_dir.mkdir(parents=True, exist_ok=True)
        report = compress_images(self.paths.images_dir, self.metadata, quality=quality)
        logger.info(
            "image_compression_completed",
            converted=len(report.converted),
            registered=len(report.registered),
            skipped=len(report.skipped),
            failed_directories=len(report.failed_directories),
        )


def prompt_for_tags(image: str, current_tags: list[str], all_tags: list[Tag]) -> list[str]:
    """Ask which taxonomy tags apply to `image`, pre-checking its current ones."""
    choices = [
        Choice(
            name=f"{tag.name} - {tag.description}",
            value=tag.name,
            checked=tag.name in current_tags,
        )
        for tag in all_tags
    ]
    return prompts.checkbox(f"Select tags for {image}", choices)


def prompt_for_new_tag() -> Tag | None:
    """Ask for a new tag; an empty name cancels."""
    prompts.console.print(
        "Name is the unique identifier for the tag, while Title is the user-friendly name.",
    )
    name = prompts.text("Enter the name for the new tag (or press Enter to cancel)").strip()
    if not name:
        return None
    title = prompts.text("Enter a title for the new tag", default=name)
    description = prompts.text("Enter a description for the new tag")
    return Tag(name=name, title=title or name, description=description)


def tag_images(session: Session) -> None:
    images = scan_images(session.paths.images_dir)
    if not images:
        prompts.console.print("No images to tag. Run 'Compress Images' first.")
        return

    selected = prompts.checkbox(
        "Select images to tag",
        [Choice(name=image, value=image) for image in images],
    )
    all_tags = session.tags.all_tags()
    for image in selected:
        current = session.metadata.get(image)
        current_label = current.label if current else ""
        current_tags = current.tags if current else []

        prompts.console.print(f"\nTagging image: [bold]{image}[/bold]")
        label = prompts.text(
            "Enter a label for the image (press Enter to keep current label)",
            default=current_label,
        )
        new_tags = prompt_for_tags(image, current_tags, all_tags)
        session.metadata.upsert(image, new_tags, label or current_label)
        logger.info("image_tagged", image=image, tags=new_tags)


def view_metadata(session: Session) -> None:
    all_tags = session.tags.all_tags()
    for record in session.metadata.records:
        prompts.console.print(f"[bold]{record.filename}[/bold]:")
        prompts.console.print(f"  Label: {record.label}")
        prompts.console.print(f"  Tags: {', '.join(record.tags)}")
        for name in record.tags:
            tag = next((t for t in all_tags if t.name == name), None)
            description = tag.description if tag else "Description not found"
            prompts.console.print(f"    - {name}: {description}")
    prompts.text("Press Enter to continue...")


def view_tags(session: Session) -> None:
    prompts.console.print("All available tags:")
    for tag in session.tags.all_tags():
        category = session.tags.category_of(tag.name)
        prompts.console.print(f"  - {tag.name} ({category}): {tag.description}")
    prompts.text("Press Enter to continue...")


def manage_tags(session: Session) -> None:
    while True:
        action = prompts.select(
            "What would you like to do with tags?",
            [
                Choice("Add New Tag", "add"),
                Choice("View All Tags", "view"),
                Choice("Back to Main Menu", "back"),
            ],
        )
        if action == "back":
            return
        if action == "add" and (new_tag := prompt_for_new_tag()):
            if session.tags.find(new_tag.name):
                logger.warning("tag_already_exists", name=new_tag.name)
                continue
            session.tags.add_tag(new_tag)
            session.tags.save()
        if action == "view":
            view_tags(session)


def report_problems(paths: ImageSetPaths) -> list[str]:
    problems = ImageSet(paths).check()
    for problem in problems:
        logger.warning("consistency_problem", problem=problem)
    if not problems:
        logger.info("image_set_consistent", root=str(paths.root))
    return problems


def run_menu(session: Session, quality: int) -> None:
    while True:
        action = prompts.select(
            "What would you like to do?",
            [
                Choice("Compress Images", "compress"),
                Choice("Tag Images", "tag"),
                Choice("View Image Metadata", "view"),
                Choice("Manage Tags", "manage"),
                Choice("Check Consistency", "check"),
                Choice("Exit", "exit"),
            ],
        )
        if action == "exit":
            return
        if action == "compress":
            session.compress(quality)
        elif action == "tag":
            tag_images(session)
        elif action == "view":
            view_metadata(session)
        elif action == "manage":
            manage_tags(session)
        elif action == "check":
            session.save()
            report_problems(session.paths)


@app.default
def main(
    *,
    compress_only: Annotated[
        bool,
        Parameter(
            name=("--compress-only",),
            negative="",
            help="Compress images, save metadata and tag config, then exit",
        ),
    ] = False,
    quality: Annotated[
        int,
        Parameter(
            name=("--quality", "-q"),
            validator=validators.Number(gte=1, lte=100),
            help="WebP quality (1-100)",
        ),
    ] = DEFAULT_WEBP_QUALITY,
    root: RootOption = DEFAULT_ROOT,
    console_log_level: ConsoleLogLevel = "INFO",
    file_log_level: FileLogLevel = "OFF",
    log_folder: LogFolder = Path("logs"),
) -> None:
    """
    Manage the image set interactively, or compress it with --compress-only.

    Behavior:
    - Loads metadata and tag config, creating defaults on first use.
    - Migrates metadata that still stores full tag objects to bare tag names.
    - Interactive menu: compress, tag images, view metadata, manage tags, check.
    - Both files are saved on exit.

    Examples:
        image-set
        image-set --compress-only --root ./my-image-set

    """
    setup_logging(
        file_log_level=file_log_level,
        console_log_level=console_log_level,
        log_folder=log_folder,
    )
    paths = ImageSetPaths.from_root(root)
    logger.info(
        "starting_image_set",
        root=str(paths.root),
        images_dir=str(paths.images_dir),
        compress_only=compress_only,
        quality=quality,
    )

    try:
        session = Session.open(paths)
        if compress_only:
            session.compress(quality)
        else:
            run_menu(session, quality)
        session.save()
    except KeyboardInterrupt:
        logger.warning("session_interrupted")
        raise SystemExit(1) from None
    except Exception as exc:  # noqa: BLE001
        logger.exception("session_failed", error=str(exc))
        raise SystemExit(1) from exc

    logger.info("session_completed", metadata=str(paths.metadata_file))


@app.command
def check(
    *,
    root: RootOption = DEFAULT_ROOT,
    console_log_level: ConsoleLogLevel = "INFO",
) -> None:
    """
    Report tags defined twice, unknown tag names and files out of sync with the metadata.

    Exit status: 1 if any problem is found.
    """
    setup_logging(console_log_level=console_log_level)
    if report_problems(ImageSetPaths.from_root(root)):
        raise SystemExit(1)


@app.command
def publish(
    *,
    bump: Annotated[
        Literal["patch", "minor", "major"] | None,
        Parameter(name=("--bump",), help="Version bump type; prompted for when omitted"),
    ] = None,
    root: RootOption = DEFAULT_ROOT,
    console_log_level: ConsoleLogLevel = "INFO",
) -> None:
    """
    Bump the version in pyproject.toml, build the package and upload it with twine.

    Requirements:
    - `build` and `twine` installed (the `release` extra).
    - Package index credentials configured for twine.
    """
    setup_logging(console_log_level=console_log_level)
    try:
        project = read_project(root / "pyproject.toml")
        logger.info(
            "current_version",
            name=project["name"],
            local=project["version"],
            published=published_version(project["name"]),
        )
        part = bump or prompts.select(
            "Enter version bump type",
            [Choice("patch", "patch"), Choice("minor", "minor"), Choice("major", "major")],
        )
        publish_release(root, part)
    except Exception as exc:  # noqa: BLE001
        logger.error("publish_failed", error=str(exc))
        raise SystemExit(1) from exc


if __name__ == "__main__":
    app()
