"""Shared fixtures: an empty image set laid out under pytest's tmp_path."""

from pathlib import Path

import pytest
from PIL import Image

from image_set.settings import ImageSetPaths


@pytest.fixture
def paths(tmp_path: Path) -> ImageSetPaths:
    """Image set rooted at tmp_path with an existing, empty image directory."""
    resolved = ImageSetPaths(
        root=tmp_path,
        images_dir=tmp_path / "public" / "images",
        metadata_file=tmp_path / "data" / "image-metadata.json",
        tag_config_file=tmp_path / "data" / "tag-config.json",
    )
    resolved.images_dir.mkdir(parents=True)
    return resolved


def write_image(path: Path, fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> Path:
    """Write a small solid-colour image for the compression tests."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, (200, 40, 40)).save(path, format=fmt)
    return path
