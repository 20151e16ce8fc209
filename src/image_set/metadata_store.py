"""Per-image metadata records persisted as a JSON list."""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from image_set.models import ImageMetadataRecord


def _tag_name(entry: Any) -> Any:  # noqa: ANN401
    if isinstance(entry, dict):
        return entry.get("name")
    return entry


def needs_migration(raw_records: list[dict[str, Any]]) -> bool:
    """Return True when any record still stores tags as structured objects."""
    return any(
        isinstance(record, dict)
        and isinstance(record.get("tags"), list)
        and any(isinstance(tag, dict) for tag in record["tags"])
        for record in raw_records
    )


def normalize_legacy_tags(raw_records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Rewrite legacy tag objects to bare tag names.

    Pure function: the input list and its records are left untouched and a new
    list is returned. Structured entries are replaced by their `name`; every
    other entry, and a `tags` value that is not a list, passes through for
    `ImageMetadataRecord` to coerce.

    Examples:
        >>> normalize_legacy_tags([{"filename": "x.webp", "tags": [{"name": "nature"}, "hq"]}])
        [{'filename': 'x.webp', 'tags': ['nature', 'hq']}]

    """
    normalized: list[dict[str, Any]] = []
    for record in raw_records:
        tags = record.get("tags") if isinstance(record, dict) else None
        if isinstance(tags, list):
            normalized.append({**record, "tags": [_tag_name(tag) for tag in tags]})
        else:
            normalized.append(record)
    return normalized


class MetadataStore:
    """
    Image metadata records with explicit load/save against `path`.

    `upsert` is the only mutation; compression and tagging both go through it.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.records: list[ImageMetadataRecord] = []
        self._pending_migration = False
        self._unparsed: list[Any] = []
        self._writable = True

    def load(self, *, create_missing: bool = True) -> None:
        """
        Load records from disk, normalizing legacy tags in memory.

        A missing file starts an empty store, written out when `create_missing`
        is true. A record that cannot be coerced is logged and kept aside
        unchanged so `save` writes it back. A file that cannot be read at all is
        logged, leaves the store as it was and is not overwritten by `save`.
        """
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                msg = f"expected a list of records, got {type(raw).__name__}"
                raise TypeError(msg)
            self._pending_migration = needs_migration(raw)
            self._parse_records(raw)
            self._writable = True
        except FileNotFoundError:
            self.records = []
            self._unparsed = []
            self._pending_migration = False
            self._writable = True
            if not create_missing:
                logger.info("metadata_file_not_found", file=str(self.path))
                return
            logger.info("metadata_file_not_found_creating", file=str(self.path))
            self.save()
        except (OSError, ValueError, TypeError) as exc:
            self._writable = False
            logger.error("metadata_load_failed", file=str(self.path), error=str(exc))
        else:
            logger.debug(
                "metadata_loaded",
                file=str(self.path),
                records=len(self.records),
                unparsed=len(self._unparsed),
                legacy=self._pending_migration,
            )

    def _parse_records(self, raw: list[Any]) -> None:
        records: list[ImageMetadataRecord] = []
        unparsed: list[Any] = []
        normalized = normalize_legacy_tags(raw)
        for index, (original, item) in enumerate(zip(raw, normalized, strict=True)):
            try:
                records.append(ImageMetadataRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "metadata_record_skipped",
                    file=str(self.path),
                    index=index,
                    error=str(exc),
                )
                unparsed.append(original)
        self.records = records
        self._unparsed = unparsed

    def save(self) -> None:
        """Persist every record, pretty-printed, followed by any unparsed entries."""
        if not self._writable:
            logger.error("metadata_save_skipped_unreadable_file", file=str(self.path))
            return
        payload = [record.model_dump() for record in self.records] + self._unparsed
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("metadata_save_failed", file=str(self.path), error=str(exc))
        else:
            logger.debug("metadata_saved", file=str(self.path), records=len(payload))

    def get(self, filename: str) -> ImageMetadataRecord | None:
        return next((record for record in self.records if record.filename == filename), None)

    def upsert(self, filename: str, tags: Any, label: Any) -> ImageMetadataRecord:  # noqa: ANN401
        """
        Replace the tags and label of `filename`, appending a record if needed.

        Args:
            filename: Relative path of the image (the record key).
            tags: Tag names; anything that is not a list is treated as no tags.
            label: Label text; falsy values become an empty string.

        Returns:
            The created or updated record.

        """
        safe_tags = list(tags) if isinstance(tags, list) else []
        safe_label = label or ""

        if (record := self.get(filename)) is not None:
            record.tags = safe_tags
            record.label = safe_label
            logger.debug("metadata_record_updated", filename=filename, tags=safe_tags)
            return record

        record = ImageMetadataRecord(filename=filename, label=safe_label, tags=safe_tags)
        self.records.append(record)
        logger.debug("metadata_record_added", filename=filename, tags=safe_tags)
        return record

    def migrate_legacy_tags(self) -> bool:
        """
        Persist records that were loaded in the legacy tag format.

        Returns:
            True if a migration was written, False when there was nothing to do.

        """
        if not self._pending_migration:
            return False
        logger.info("migrating_metadata_to_tag_names", records=len(self.records))
        self.save()
        self._pending_migration = False
        logger.info("metadata_migration_completed")
        return True
