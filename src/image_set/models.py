"""Data models shared by the tag store, the metadata store and the read API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


TAG_CATEGORIES = ("subject", "version", "general")


def as_text(value: Any) -> str:  # noqa: ANN401
    """
    Coerce a JSON scalar to a string; null becomes an empty string.

    Examples:
        >>> as_text(None), as_text(5), as_text("hq")
        ('', '5', 'hq')

    """
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class Tag(BaseModel):
    """A taxonomy entry; `name` is the identifier referenced by image metadata."""

    model_config = ConfigDict(extra="allow")

    name: str
    title: str = ""
    description: str = ""

    @field_validator("name", "title", "description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:  # noqa: ANN401
        return as_text(value)


class TagConfig(BaseModel):
    """Tag taxonomy split into three ordered categories."""

    model_config = ConfigDict(extra="allow")

    subject: list[Tag] = Field(default_factory=list)
    version: list[Tag] = Field(default_factory=list)
    general: list[Tag] = Field(default_factory=list)

    @field_validator(*TAG_CATEGORIES, mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> list[Any]:  # noqa: ANN401
        return value if isinstance(value, list) else []

    def all_tags(self) -> list[Tag]:
        """Return every tag, subject first, then version, then general."""
        return [*self.subject, *self.version, *self.general]

    def category_of(self, name: str) -> str | None:
        """Return the first category containing `name`, searching subject, version, general."""
        for category in TAG_CATEGORIES:
            if any(tag.name == name for tag in getattr(self, category)):
                return category
        return None

    def duplicate_names(self) -> list[str]:
        """
        Return tag names defined more than once across all categories.

        Examples:
            >>> TagConfig(subject=[Tag(name="a")], general=[Tag(name="a")]).duplicate_names()
            ['a']

        """
        seen: set[str] = set()
        duplicates: list[str] = []
        for tag in self.all_tags():
            if tag.name in seen and tag.name not in duplicates:
                duplicates.append(tag.name)
            seen.add(tag.name)
        return duplicates


class ImageMetadataRecord(BaseModel):
    """Persisted metadata for one image. Tags are stored as bare names."""

    model_config = ConfigDict(extra="allow")

    filename: str
    label: str = ""
    tags: list[str] = Field(default_factory=list)

    @field_validator("label", mode="before")
    @classmethod
    def coerce_label(cls, value: Any) -> str:  # noqa: ANN401
        return as_text(value) if value else ""

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> list[str]:  # noqa: ANN401
        """Non-list values read as no tags; null entries are dropped, other scalars stringified."""
        if not isinstance(value, list):
            return []
        return [as_text(tag) for tag in value if tag is not None and not isinstance(tag, dict)]


class ResolvedImageMetadata(BaseModel):
    """Read-time view of a record with each tag name resolved to a full Tag."""

    model_config = ConfigDict(extra="allow")

    filename: str
    label: str = ""
    tags: list[Tag] = Field(default_factory=list)


def default_tag_config() -> TagConfig:
    """Seed taxonomy written the first time an image set is opened."""
    return TagConfig(
        subject=[
            Tag(
                name="nature",
                title="Nature",
                description="Images of natural landscapes, flora, or fauna",
            ),
            Tag(
                name="tech",
                title="Technology",
                description="Images related to technological devices or concepts",
            ),
            Tag(
                name="people",
                title="People",
                description="Images featuring individuals or groups of people",
            ),
        ],
        version=[
            Tag(name="1_0_0", title="Image set Version 1", description="Images from Version 1"),
            Tag(name="1_1_0", title="Image set Version 1.1", description="Images from Version 1.1"),
            Tag(name="2_0_0", title="Image set Version 2.0", description="Images from Version 2"),
        ],
        general=[
            Tag(
                name="hq",
                title="High Quality",
                description="Images with exceptional clarity and detail",
            ),
            Tag(name="colorful", title="Colorful", description="Images with a vibrant color palette"),
            Tag(name="monochrome", title="Black and White", description="Monochrome images"),
        ],
    )
