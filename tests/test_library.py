"""Tests for the read API that joins metadata records with the tag taxonomy."""

import json
from pathlib import Path

import pytest

import image_set.library as lib
import image_set.settings as settings
from image_set.metadata_store import MetadataStore
from image_set.models import Tag, TagConfig
from image_set.settings import ImageSetPaths
from image_set.tag_store import TagStore


def _seed(paths: ImageSetPaths, records: list[dict], config: TagConfig | None = None) -> None:
    paths.metadata_file.parent.mkdir(parents=True, exist_ok=True)
    paths.metadata_file.write_text(json.dumps(records), encoding="utf-8")
    store = TagStore(paths.tag_config_file)
    store.load()
    if config is not None:
        store.config = config
        store.save()


def test_empty_image_set_reads_empty_and_writes_nothing(paths: ImageSetPaths) -> None:
    """Reads over a fresh image set never create the data files."""
    image_set = lib.ImageSet(paths)

    assert image_set.image_list() == []
    assert image_set.metadata() == []
    assert image_set.all_tags() == []
    assert image_set.tag_config() == TagConfig()
    assert not paths.metadata_file.exists()
    assert not paths.tag_config_file.exists()


def test_stores_create_defaults_on_first_load(paths: ImageSetPaths) -> None:
    """Loading both stores on an empty image set persists their defaults."""
    MetadataStore(paths.metadata_file).load()
    TagStore(paths.tag_config_file).load()

    image_set = lib.ImageSet(paths)
    assert paths.metadata_file.exists()
    assert len(image_set.all_tags()) == 9
    assert image_set.image_list() == []


def test_metadata_resolves_tags_position_for_position(paths: ImageSetPaths) -> None:
    """Each resolved tag keeps the name at the same position; orphans get a placeholder."""
    _seed(paths, [{"filename": "x.webp", "label": "L", "tags": ["hq", "ghost", "nature", "hq"]}])

    [item] = lib.ImageSet(paths).metadata()

    assert [tag.name for tag in item.tags] == ["hq", "ghost", "nature", "hq"]
    assert item.tags[0].title == "High Quality"
    assert item.tags[1] == Tag(name="ghost", title="ghost", description="")
    assert item.label == "L"


def test_metadata_does_not_rewrite_stored_names(paths: ImageSetPaths) -> None:
    """Resolution happens in memory only."""
    _seed(paths, [{"filename": "x.webp", "label": "", "tags": ["hq"]}])
    before = paths.metadata_file.read_text(encoding="utf-8")

    lib.ImageSet(paths).metadata()

    assert paths.metadata_file.read_text(encoding="utf-8") == before


def test_metadata_by_path_returns_match_or_none(paths: ImageSetPaths) -> None:
    """Lookup by relative path returns the resolved record or None."""
    _seed(paths, [{"filename": "trips/a.webp", "label": "A", "tags": ["tech"]}])
    image_set = lib.ImageSet(paths)

    found = image_set.metadata_by_path("trips/a.webp")

    assert found is not None
    assert found.tags[0].title == "Technology"
    assert image_set.metadata_by_path("missing.webp") is None


def test_category_of_and_orphan_tags(paths: ImageSetPaths) -> None:
    """Category lookup walks subject, version, general; orphans are listed per file."""
    _seed(
        paths,
        [
            {"filename": "a.webp", "tags": ["1_0_0", "unknown"]},
            {"filename": "b.webp", "tags": ["hq"]},
        ],
    )
    image_set = lib.ImageSet(paths)

    assert image_set.category_of("1_0_0") == "version"
    assert image_set.category_of("unknown") is None
    assert image_set.orphan_tags() == {"a.webp": ["unknown"]}


def test_check_reports_every_kind_of_problem(paths: ImageSetPaths) -> None:
    """Duplicates, orphans, stale records and unregistered files are all reported."""
    config = TagConfig(
        subject=[Tag(name="hq", title="HQ")],
        general=[Tag(name="hq", title="High Quality")],
    )
    _seed(
        paths,
        [
            {"filename": "gone.webp", "tags": []},
            {"filename": "here.webp", "tags": ["hq", "ghost"]},
        ],
        config,
    )
    (paths.images_dir / "here.webp").write_bytes(b"x")
    (paths.images_dir / "new.webp").write_bytes(b"x")

    problems = lib.ImageSet(paths).check()

    assert problems == [
        "tag 'hq' is defined more than once",
        "here.webp: unknown tag 'ghost'",
        "gone.webp: metadata without image file",
        "new.webp: image file without metadata",
    ]


def test_image_set_name_strips_scope(paths: ImageSetPaths) -> None:
    """The name comes from pyproject.toml without its scope prefix."""
    paths.pyproject.write_text('[project]\nname = "@acme/holiday-images"\n', encoding="utf-8")

    assert lib.ImageSet(paths).name == "holiday-images"


def test_image_set_name_falls_back_to_root_directory(paths: ImageSetPaths) -> None:
    """Without a project file the root directory name is used."""
    assert lib.ImageSet(paths).name == Path(paths.root).resolve().name


def test_module_level_api_reads_default_root(
    paths: ImageSetPaths,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The public functions read the image set under IMAGE_SET_ROOT's default."""
    monkeypatch.setattr(settings, "DEFAULT_ROOT", paths.root)
    _seed(paths, [{"filename": "a.webp", "label": "A", "tags": ["people"]}])
    (paths.images_dir / "a.webp").write_bytes(b"x")

    assert lib.get_image_list() == ["a.webp"]
    assert lib.get_image_set_name() == Path(paths.root).resolve().name
    assert [tag.name for tag in lib.get_all_tags()][:3] == ["nature", "tech", "people"]
    assert lib.get_tag_config().general[0].name == "hq"
    assert lib.get_image_metadata()[0].tags[0].title == "People"
    assert lib.get_image_metadata_by_path("a.webp").label == "A"
    assert lib.get_image_metadata_by_path("b.webp") is None
