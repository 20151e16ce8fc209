"""Tag taxonomy persisted as a JSON file."""

import json
from pathlib import Path

from loguru import logger

from image_set.models import TAG_CATEGORIES, Tag, TagConfig, default_tag_config


class TagStore:
    """
    In-memory tag taxonomy with explicit load/save against `path`.

    Failures while reading or writing are logged and never raised; the
    in-memory taxonomy stays at its last good value, and a file that could not
    be read is left untouched by `save`.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.config = TagConfig()
        self._writable = True

    def load(self, *, create_missing: bool = True) -> None:
        """
        Load the taxonomy from disk.

        A missing file is seeded with the default taxonomy and saved when
        `create_missing` is true; read-only callers pass False and get an empty
        taxonomy instead.
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            self.config = TagConfig.model_validate(data)
            self._writable = True
        except FileNotFoundError:
            self._writable = True
            if not create_missing:
                logger.info("tag_config_not_found", file=str(self.path))
                return
            logger.info("tag_config_not_found_creating_defaults", file=str(self.path))
            self.config = default_tag_config()
            self.save()
        except (OSError, ValueError) as exc:
            self._writable = False
            logger.error("tag_config_load_failed", file=str(self.path), error=str(exc))
        else:
            logger.debug(
                "tag_config_loaded",
                file=str(self.path),
                **{category: len(getattr(self.config, category)) for category in TAG_CATEGORIES},
            )

    def save(self) -> None:
        """Write the whole taxonomy, pretty-printed, keys in category order."""
        if not self._writable:
            logger.error("tag_config_save_skipped_unreadable_file", file=str(self.path))
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self.config.model_dump(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("tag_config_save_failed", file=str(self.path), error=str(exc))
        else:
            logger.debug("tag_config_saved", file=str(self.path))

    def all_tags(self) -> list[Tag]:
        return self.config.all_tags()

    def add_tag(self, tag: Tag) -> None:
        """Append `tag` to the general category. Callers check for duplicates."""
        self.config.general.append(tag)
        logger.info("tag_added", name=tag.name, title=tag.title)

    def find(self, name: str) -> Tag | None:
        return next((tag for tag in self.all_tags() if tag.name == name), None)

    def category_of(self, name: str) -> str | None:
        return self.config.category_of(name)
