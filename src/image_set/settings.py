"""
Locations of the image set's files and the image-set name.

Every default can be overridden with an environment variable, and the CLI
options override those in turn.
"""

import os
import tomllib
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict


DEFAULT_ROOT = Path(os.getenv("IMAGE_SET_ROOT", "."))
DEFAULT_IMAGES_DIR = os.getenv("IMAGE_SET_IMAGES_DIR")
DEFAULT_METADATA_FILE = os.getenv("IMAGE_SET_METADATA_FILE")
DEFAULT_TAG_CONFIG_FILE = os.getenv("IMAGE_SET_TAG_CONFIG_FILE")
DEFAULT_IMAGE_SET_NAME = os.getenv("IMAGE_SET_NAME")
DEFAULT_WEBP_QUALITY = int(os.getenv("WEBP_QUALITY", "80"))

PROCESSED_EXTENSION = ".webp"
UNPROCESSED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})


class ImageSetPaths(BaseModel):
    """Resolved file locations for one image set."""

    model_config = ConfigDict(frozen=True)

    root: Path
    images_dir: Path
    metadata_file: Path
    tag_config_file: Path

    @property
    def pyproject(self) -> Path:
        return self.root / "pyproject.toml"

    @classmethod
    def from_root(
        cls,
        root: Path | None = None,
        *,
        images_dir: Path | None = None,
        metadata_file: Path | None = None,
        tag_config_file: Path | None = None,
    ) -> "ImageSetPaths":
        """
        Build the paths for an image set rooted at `root`.

        Explicit arguments win over environment variables, which win over the
        layout defaults (`public/images`, `data/image-metadata.json`,
        `data/tag-config.json`).

        Examples:
            >>> ImageSetPaths.from_root(Path("/srv/set")).images_dir  # doctest: +SKIP
            PosixPath('/srv/set/public/images')

        """
        base = root or DEFAULT_ROOT
        return cls(
            root=base,
            images_dir=images_dir or _env_path(DEFAULT_IMAGES_DIR) or base / "public" / "images",
            metadata_file=metadata_file
            or _env_path(DEFAULT_METADATA_FILE)
            or base / "data" / "image-metadata.json",
            tag_config_file=tag_config_file
            or _env_path(DEFAULT_TAG_CONFIG_FILE)
            or base / "data" / "tag-config.json",
        )


def _env_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def strip_scope(name: str) -> str:
    """
    Remove a leading `scope/` prefix from a project name.

    Examples:
        >>> strip_scope("@acme/holiday-images")
        'holiday-images'
        >>> strip_scope("holiday-images")
        'holiday-images'

    """
    return name.rsplit("/", 1)[-1]


def image_set_name(paths: ImageSetPaths) -> str:
    """
    Return the name of the image set.

    Uses `IMAGE_SET_NAME` when set, then `[project].name` from the root's
    pyproject.toml, then the name of the root directory.
    """
    if DEFAULT_IMAGE_SET_NAME:
        return strip_scope(DEFAULT_IMAGE_SET_NAME)

    try:
        with paths.pyproject.open("rb") as fh:
            project = tomllib.load(fh).get("project", {})
    except FileNotFoundError:
        project = {}
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("pyproject_unreadable", file=str(paths.pyproject), error=str(exc))
        project = {}

    if name := project.get("name"):
        return strip_scope(str(name))
    return paths.root.resolve().name
