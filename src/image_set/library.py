"""
Read API over an image set.

`ImageSet` joins the metadata records with the tag taxonomy. Reads never write
to disk: missing files read as empty. The module-level functions are the
public API used by downstream rendering code; each call reads the files afresh.
"""

from loguru import logger

from image_set.metadata_store import MetadataStore
from image_set.models import ImageMetadataRecord, ResolvedImageMetadata, Tag, TagConfig
from image_set.scanner import scan_images
from image_set.settings import ImageSetPaths, image_set_name
from image_set.tag_store import TagStore


def resolve_tags(tag_names: list[str], known_tags: list[Tag]) -> list[Tag]:
    """
    Resolve tag names against `known_tags`, position for position.

    The first definition of a name wins. Names missing from the taxonomy become
    a placeholder tag titled with the name itself.

    Examples:
        >>> [t.title for t in resolve_tags(["hq", "ghost"], [Tag(name="hq", title="HQ")])]
        ['HQ', 'ghost']

    """
    by_name: dict[str, Tag] = {}
    for tag in known_tags:
        by_name.setdefault(tag.name, tag)

    resolved: list[Tag] = []
    for name in tag_names:
        if (tag := by_name.get(name)) is None:
            logger.debug("orphan_tag_resolved_to_placeholder", name=name)
            tag = Tag(name=name, title=name, description="")
        resolved.append(tag)
    return resolved


def resolve_record(record: ImageMetadataRecord, known_tags: list[Tag]) -> ResolvedImageMetadata:
    return ResolvedImageMetadata.model_validate(
        {**record.model_dump(), "tags": resolve_tags(record.tags, known_tags)},
    )


class ImageSet:
    """Read-only view of one image set."""

    def __init__(self, paths: ImageSetPaths | None = None) -> None:
        self.paths = paths or ImageSetPaths.from_root()

    @property
    def name(self) -> str:
        return image_set_name(self.paths)

    def image_list(self) -> list[str]:
        return scan_images(self.paths.images_dir)

    def tag_config(self) -> TagConfig:
        store = TagStore(self.paths.tag_config_file)
        store.load(create_missing=False)
        return store.config

    def all_tags(self) -> list[Tag]:
        return self.tag_config().all_tags()

    def records(self) -> list[ImageMetadataRecord]:
        """Stored records with tags as bare names."""
        store = MetadataStore(self.paths.metadata_file)
        store.load(create_missing=False)
        return store.records

    def metadata(self) -> list[ResolvedImageMetadata]:
        """Every metadata record with its tag names resolved to full tags."""
        known_tags = self.all_tags()
        return [resolve_record(record, known_tags) for record in self.records()]

    def metadata_by_path(self, path: str) -> ResolvedImageMetadata | None:
        return next((item for item in self.metadata() if item.filename == path), None)

    def category_of(self, name: str) -> str | None:
        return self.tag_config().category_of(name)

    def orphan_tags(self) -> dict[str, list[str]]:
        """Map each filename to the tag names it uses that the taxonomy lacks."""
        known = {tag.name for tag in self.all_tags()}
        orphans: dict[str, list[str]] = {}
        for record in self.records():
            if missing := [name for name in record.tags if name not in known]:
                orphans[record.filename] = missing
        return orphans

    def check(self) -> list[str]:
        """
        Cross-check the taxonomy, the metadata and the image files.

        Returns:
            One human readable line per problem: tag names defined twice,
            orphan tag names, records without an image file and image files
            without a record. Empty when everything is consistent.

        """
        problems = [
            f"tag '{name}' is defined more than once"
            for name in self.tag_config().duplicate_names()
        ]
        problems.extend(
            f"{filename}: unknown tag '{name}'"
            for filename, names in self.orphan_tags().items()
            for name in names
        )

        images = set(self.image_list())
        recorded = {record.filename for record in self.records()}
        problems.extend(
            f"{filename}: metadata without image file" for filename in sorted(recorded - images)
        )
        problems.extend(
            f"{filename}: image file without metadata" for filename in sorted(images - recorded)
        )
        return problems


def get_image_list() -> list[str]:
    return ImageSet().image_list()


def get_image_set_name() -> str:
    return ImageSet().name


def get_image_metadata() -> list[ResolvedImageMetadata]:
    return ImageSet().metadata()


def get_tag_config() -> TagConfig:
    return ImageSet().tag_config()


def get_all_tags() -> list[Tag]:
    return ImageSet().all_tags()


def get_image_metadata_by_path(path: str) -> ResolvedImageMetadata | None:
    return ImageSet().metadata_by_path(path)
