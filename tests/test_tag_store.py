"""Tests for the tag taxonomy store."""

import json
from pathlib import Path

from image_set.models import Tag, TagConfig, default_tag_config
from image_set.tag_store import TagStore


def test_load_missing_file_seeds_and_persists_defaults(tmp_path: Path) -> None:
    """First use writes the default taxonomy, three tags per category."""
    path = tmp_path / "data" / "tag-config.json"
    store = TagStore(path)

    store.load()

    assert store.config == default_tag_config()
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert list(saved) == ["subject", "version", "general"]
    assert [len(saved[category]) for category in saved] == [3, 3, 3]
    assert saved["general"][0] == {
        "name": "hq",
        "title": "High Quality",
        "description": "Images with exceptional clarity and detail",
    }


def test_load_missing_file_read_only_creates_nothing(tmp_path: Path) -> None:
    """Read-only loads leave the taxonomy empty and the disk untouched."""
    path = tmp_path / "tag-config.json"
    store = TagStore(path)

    store.load(create_missing=False)

    assert store.all_tags() == []
    assert not path.exists()


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    """A saved taxonomy loads back structurally equal."""
    path = tmp_path / "tag-config.json"
    store = TagStore(path)
    store.config = TagConfig(
        subject=[Tag(name="city", title="City", description="Urban scenes")],
        general=[Tag(name="néon", title="Néon", description="")],
    )
    store.save()

    reloaded = TagStore(path)
    reloaded.load()

    assert reloaded.config == store.config


def test_malformed_file_keeps_last_good_state(tmp_path: Path) -> None:
    """Broken JSON is logged, not raised, and the in-memory taxonomy survives."""
    path = tmp_path / "tag-config.json"
    store = TagStore(path)
    store.load()
    before = store.config.model_copy(deep=True)

    path.write_text("{not json", encoding="utf-8")
    store.load()

    assert store.config == before


def test_all_tags_orders_subject_version_general() -> None:
    """Concatenation order is subject, then version, then general."""
    store = TagStore(Path("unused.json"))
    store.config = default_tag_config()

    names = [tag.name for tag in store.all_tags()]

    assert names == [
        "nature",
        "tech",
        "people",
        "1_0_0",
        "1_1_0",
        "2_0_0",
        "hq",
        "colorful",
        "monochrome",
    ]
    config = store.config
    assert len(names) == len(config.subject) + len(config.version) + len(config.general)


def test_add_tag_appends_to_general_without_dedup() -> None:
    """New tags always land at the end of the general category."""
    store = TagStore(Path("unused.json"))
    store.config = default_tag_config()

    store.add_tag(Tag(name="hq", title="Again", description=""))

    assert store.config.general[-1].title == "Again"
    assert [tag.name for tag in store.config.general].count("hq") == 2
    assert store.config.duplicate_names() == ["hq"]


def test_find_and_category_of_search_in_category_order() -> None:
    """Lookups return the first definition, searching subject before version and general."""
    store = TagStore(Path("unused.json"))
    store.config = TagConfig(
        subject=[Tag(name="shared", title="From subject")],
        general=[Tag(name="shared", title="From general"), Tag(name="hq")],
    )

    assert store.find("shared").title == "From subject"
    assert store.category_of("shared") == "subject"
    assert store.category_of("hq") == "general"
    assert store.find("missing") is None
    assert store.category_of("missing") is None


def test_extra_fields_survive_round_trip(tmp_path: Path) -> None:
    """Unknown keys on tags and at the top level are written back verbatim."""
    path = tmp_path / "tag-config.json"
    payload = {
        "subject": [{"name": "city", "title": "City", "description": "", "color": "red"}],
        "version": [],
        "general": [],
        "schema": 2,
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    store = TagStore(path)
    store.load()
    store.save()

    assert json.loads(path.read_text(encoding="utf-8")) == payload


def test_null_fields_are_coerced_to_empty_strings(tmp_path: Path) -> None:
    """A null description or category reads as empty instead of discarding the taxonomy."""
    path = tmp_path / "tag-config.json"
    path.write_text(
        json.dumps(
            {
                "subject": [{"name": "city", "title": "City", "description": None}],
                "version": None,
                "general": [{"name": "hq", "title": None, "description": "Sharp"}],
            },
        ),
        encoding="utf-8",
    )
    store = TagStore(path)
    store.load()
    store.save()

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["subject"] == [{"name": "city", "title": "City", "description": ""}]
    assert saved["version"] == []
    assert saved["general"] == [{"name": "hq", "title": "", "description": "Sharp"}]


def test_unreadable_file_is_not_overwritten(tmp_path: Path) -> None:
    """Saving after a failed load keeps the broken file instead of writing an empty taxonomy."""
    path = tmp_path / "tag-config.json"
    path.write_text('{"subject": [{"title": "no name"}]}', encoding="utf-8")
    store = TagStore(path)
    store.load()

    store.add_tag(Tag(name="night"))
    store.save()

    assert path.read_text(encoding="utf-8") == '{"subject": [{"title": "no name"}]}'
