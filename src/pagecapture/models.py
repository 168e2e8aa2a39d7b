"""Data models for pagecapture."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Category(str, Enum):
    """Closed classification of a document's primary content."""

    COMMERCE = "commerce"
    ARTICLE = "article"
    VIDEO = "video"
    GENERIC = "generic"
    TEXT = "text"


# Metadata keys each category always carries. Missing values are None.
METADATA_KEYS: dict[Category, tuple[str, ...]] = {
    Category.COMMERCE: ("price", "rating", "catalogId", "imageUrl"),
    Category.ARTICLE: ("author", "publishedDate", "imageUrl"),
    Category.VIDEO: ("platform", "channel", "thumbnailUrl", "description"),
    Category.GENERIC: (),
    Category.TEXT: (),
}


class ExtractedRecord(BaseModel):
    """Typed description of a document's primary content.

    Built once per extraction call and handed to the caller. Every metadata key
    of the category's shape is present, so consumers never test for absence.
    """

    category: Category = Category.GENERIC
    title: str = ""
    body: str = ""
    metadata: dict[str, str | None] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_metadata_shape(self) -> "ExtractedRecord":
        for key in METADATA_KEYS[self.category]:
            self.metadata.setdefault(key, None)
        return self

    @classmethod
    def build(cls, category: Category, title: str = "", body: str = "", **metadata: str | None) -> "ExtractedRecord":
        """Create a record, normalising empty metadata strings to None.

        Args:
            category: Content category.
            title: Record title.
            body: Record body text.
            **metadata: Category metadata values.

        Returns:
            ExtractedRecord with the full metadata shape for the category.
        """
        return cls(
            category=category,
            title=title or "",
            body=body or "",
            metadata={key: (value or None) for key, value in metadata.items()},
        )


class ItemPayload(BaseModel):
    """Request body accepted by the item store."""

    title: str
    body: str
    source_url: str
    category: Category
    metadata: dict[str, str | None] = Field(default_factory=dict)
    image_url: str | None = None


class ExtractionResponse(ExtractedRecord):
    """Record returned to the host runtime for an extraction request.

    On an unexpected failure the response is still sent: category is generic,
    the body holds a prefix of the raw page text and ``error`` is set.
    """

    url: str = ""
    error: str | None = None

    @classmethod
    def from_record(cls, record: ExtractedRecord, url: str) -> "ExtractionResponse":
        """Attach the page URL to an extracted record."""
        return cls(
            category=record.category,
            title=record.title,
            body=record.body,
            metadata=dict(record.metadata),
            url=url,
        )

    def to_item_payload(self) -> ItemPayload:
        """Map onto the item store request, promoting the preview image.

        A video thumbnail takes precedence over a generic image URL.
        """
        image_url = self.metadata.get("thumbnailUrl") or self.metadata.get("imageUrl")
        return ItemPayload(
            title=self.title,
            body=self.body,
            source_url=self.url,
            category=self.category,
            metadata=dict(self.metadata),
            image_url=image_url,
        )

    def to_message(self) -> dict[str, Any]:
        """Serialise for the host runtime, omitting an unset error."""
        data = self.model_dump(mode="json")
        if self.error is None:
            data.pop("error")
        return data


class VideoIdentity(BaseModel):
    """Identity of the video the page URL currently points to."""

    model_config = ConfigDict(frozen=True)

    id: str
    source: Literal["url"] = "url"


# =============================================================================
# Re-parser Models
# =============================================================================


class TaskItem(BaseModel):
    """A single task recovered from saved text."""

    text: str
    completed: bool = False


class TaskProgress(BaseModel):
    """Completion summary for a task list."""

    completed: int = 0
    total: int = 0

    @property
    def percent(self) -> float:
        """Completed share as a percentage (0 for an empty list)."""
        if self.total == 0:
            return 0.0
        return self.completed / self.total * 100


class RecipeSections(BaseModel):
    """Ingredient and instruction lists recovered from saved recipe text.

    Both lists empty means nothing was recognised and the raw body should be
    shown instead.
    """

    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.ingredients and not self.instructions


class RecipeInfo(BaseModel):
    """Headline facts about a recipe."""

    prep_time: str | None = None
    cook_time: str | None = None
    servings: str | None = None
