"""Locator/accessor data and the per-site selector tables.

Field locations are plain data: a ``FieldCandidate`` pairs a CSS locator with
an ``Accessor`` describing how to read the value once the locator resolves.
The tables below are the default configuration surface; a JSON file with the
same shape can replace any category's lists (see ``load_selector_table``)
without touching the extraction algorithms.

Adding a field location:
1. Append a candidate to the relevant list, in priority order
2. Use ``text()``, ``attr()`` or ``pattern()`` to pick the accessor
3. Add a ``min_length`` threshold or ``prune`` list for body-like fields
"""

import json
import logging
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from pagecapture.document import Element
from pagecapture.exceptions import ConfigurationError

LOGGER = logging.getLogger(__name__)


class Accessor(BaseModel):
    """How to read a value from a resolved element.

    Kinds:
    - text: rendered text, falling back to ``names`` attributes when empty
    - attr: first non-empty attribute among ``names``
    - regex: ``pattern`` applied to the text (or ``names`` attributes), returning ``group``
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["text", "attr", "regex"] = "text"
    names: tuple[str, ...] = ()
    pattern: str | None = None
    group: int = 1

    def read(self, element: Element) -> str:
        """Read the value from ``element``; an empty string means a miss."""
        if self.kind == "attr":
            return self._first_attr(element)

        source = element.text() or self._first_attr(element)
        if self.kind == "text":
            return source

        if not self.pattern or not source:
            return ""
        match = re.search(self.pattern, source, re.IGNORECASE)
        if not match:
            return ""
        try:
            return match.group(self.group) or ""
        except IndexError:
            LOGGER.debug(f"Pattern {self.pattern!r} has no group {self.group}")
            return ""

    def _first_attr(self, element: Element) -> str:
        for name in self.names:
            value = element.attr(name).strip()
            if value:
                return value
        return ""


class FieldCandidate(BaseModel):
    """One prioritised location for a field.

    Attributes:
        locator: CSS selector; the first matching element is read
        accessor: How to read the value
        min_length: When set, the value must be longer than this to be accepted
        prune: Selectors of non-content nodes removed before reading
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    locator: str
    accessor: Accessor = Field(default_factory=Accessor)
    min_length: int = 0
    prune: tuple[str, ...] = ()


def text(locator: str, *fallback_attrs: str, min_length: int = 0, prune: tuple[str, ...] = ()) -> FieldCandidate:
    """Candidate read as rendered text."""
    return FieldCandidate(
        locator=locator,
        accessor=Accessor(kind="text", names=fallback_attrs),
        min_length=min_length,
        prune=prune,
    )


def attr(locator: str, *names: str) -> FieldCandidate:
    """Candidate read from the first non-empty attribute of ``names``."""
    return FieldCandidate(locator=locator, accessor=Accessor(kind="attr", names=names))


def pattern(locator: str, regex: str, *fallback_attrs: str, group: int = 1) -> FieldCandidate:
    """Candidate read as a regex group over the text (or fallback attributes)."""
    return FieldCandidate(
        locator=locator,
        accessor=Accessor(kind="regex", names=fallback_attrs, pattern=regex, group=group),
    )


# =============================================================================
# Default Selector Tables
# =============================================================================

ARTICLE_PRUNE = ("script", "style", "nav", "aside", ".ad", ".advertisement")
GENERIC_PRUNE = ("script", "style", "nav", "header", "footer", "aside", ".ad")
GENERIC_FALLBACK_PRUNE = GENERIC_PRUNE + (".advertisement",)

RATING_REGEX = r"(\d+\.?\d*)\s*(out of|stars?)"


class CommerceSelectors(BaseModel):
    """Marketplace product page locations."""

    title: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("#productTitle"),
            text("h1.a-size-large"),
            text('[data-automation-id="title"]'),
            text('h1[data-automation-id="title"]'),
        ]
    )
    price: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text(".a-price .a-offscreen"),
            text("#priceblock_ourprice"),
            text("#priceblock_dealprice"),
            text(".a-price-whole"),
            text('[data-automation-id="price"]'),
        ]
    )
    rating: list[FieldCandidate] = Field(
        default_factory=lambda: [
            pattern("#acrPopover", RATING_REGEX, "aria-label", "title"),
            pattern(".a-icon-alt", RATING_REGEX, "aria-label"),
            pattern('[data-automation-id="star-rating"]', RATING_REGEX, "aria-label"),
        ]
    )
    image: list[FieldCandidate] = Field(
        default_factory=lambda: [
            attr("#landingImage", "src", "data-src", "data-old-src"),
            attr("#imgBlkFront", "src", "data-src", "data-old-src"),
            attr("#main-image", "src", "data-src", "data-old-src"),
            attr('[data-automation-id="product-image"] img', "src", "data-src", "data-old-src"),
            attr(".a-dynamic-image", "src", "data-src", "data-old-src"),
        ]
    )
    description: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("#feature-bullets", min_length=50),
            text("#productDescription", min_length=50),
            text("#productDescription_feature_div", min_length=50),
            text('[data-automation-id="product-description"]', min_length=50),
        ]
    )


class ArticleSelectors(BaseModel):
    """Blog post and news article locations."""

    title: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("article h1"),
            text(".post-title"),
            text(".entry-title"),
            text("h1.entry-title"),
            text('[itemprop="headline"]'),
            text("h1.post-title"),
        ]
    )
    author: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text('[rel="author"]'),
            text(".author"),
            text(".post-author"),
            text('[itemprop="author"]', "content"),
            text(".byline"),
            attr('meta[name="author"]', "content"),
        ]
    )
    published_date: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("time[datetime]", "datetime"),
            text(".post-date"),
            text(".entry-date"),
            text('[itemprop="datePublished"]', "datetime", "content"),
            text(".published"),
            attr('meta[property="article:published_time"]', "content"),
        ]
    )
    image: list[FieldCandidate] = Field(
        default_factory=lambda: [
            attr("article img", "src", "data-src"),
            attr(".post-thumbnail img", "src", "data-src"),
            attr(".featured-image img", "src", "data-src"),
            attr('[itemprop="image"]', "src", "content"),
            attr('meta[property="og:image"]', "content"),
        ]
    )
    body: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("article", min_length=200, prune=ARTICLE_PRUNE),
            text(".post-content", min_length=200, prune=ARTICLE_PRUNE),
            text(".entry-content", min_length=200, prune=ARTICLE_PRUNE),
            text('[itemprop="articleBody"]', min_length=200, prune=ARTICLE_PRUNE),
            text(".post-body", min_length=200, prune=ARTICLE_PRUNE),
            text("main article", min_length=200, prune=ARTICLE_PRUNE),
        ]
    )


class VideoSelectors(BaseModel):
    """Video platform page locations."""

    title: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("h1.ytd-watch-metadata yt-formatted-string"),
            text("h1.ytd-video-primary-info-renderer"),
        ]
    )
    channel: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("#channel-name a"),
            text(".ytd-channel-name a"),
        ]
    )
    thumbnail: list[FieldCandidate] = Field(
        default_factory=lambda: [
            attr('meta[property="og:image"]', "content"),
            attr('meta[name="twitter:image"]', "content"),
        ]
    )
    # "Show more" controls, tried in order; the first genuine one is activated
    expand_controls: list[str] = Field(
        default_factory=lambda: [
            "ytd-expander #more",
            "ytd-video-secondary-info-renderer #more",
            'tp-yt-paper-button[id="more"]',
            'button[aria-label*="more" i]',
            'button:-soup-contains("Show more", "show more", "SHOW MORE")',
        ]
    )
    description_regions: list[str] = Field(
        default_factory=lambda: [
            "ytd-expander #content",
            "ytd-video-secondary-info-renderer #description",
            "#description-text",
            "#description",
            ".ytd-video-secondary-info-renderer #description",
            "yt-formatted-string#content-text",
            "yt-formatted-string.style-scope.ytd-video-secondary-info-renderer",
            "ytd-video-secondary-info-renderer yt-formatted-string",
        ]
    )
    vimeo_title: list[FieldCandidate] = Field(default_factory=lambda: [text("h1")])
    vimeo_description: list[FieldCandidate] = Field(default_factory=lambda: [text(".description")])
    player: list[FieldCandidate] = Field(default_factory=lambda: [attr("video", "poster")])


class GenericSelectors(BaseModel):
    """Content containers for pages without a more specific category."""

    body: list[FieldCandidate] = Field(
        default_factory=lambda: [
            text("article", min_length=200, prune=GENERIC_PRUNE),
            text("main", min_length=200, prune=GENERIC_PRUNE),
            text('[role="main"]', min_length=200, prune=GENERIC_PRUNE),
            text(".content", min_length=200, prune=GENERIC_PRUNE),
            text(".post", min_length=200, prune=GENERIC_PRUNE),
            text(".entry-content", min_length=200, prune=GENERIC_PRUNE),
            text("#content", min_length=200, prune=GENERIC_PRUNE),
        ]
    )
    fallback_prune: tuple[str, ...] = GENERIC_FALLBACK_PRUNE


class SelectorTable(BaseModel):
    """All site selector tables, one section per category."""

    model_config = ConfigDict(extra="forbid")

    commerce: CommerceSelectors = Field(default_factory=CommerceSelectors)
    article: ArticleSelectors = Field(default_factory=ArticleSelectors)
    video: VideoSelectors = Field(default_factory=VideoSelectors)
    generic: GenericSelectors = Field(default_factory=GenericSelectors)


DEFAULT_SELECTORS = SelectorTable()


def load_selector_table(path: Path | str) -> SelectorTable:
    """Load a selector table override from JSON.

    Sections and fields missing from the file keep their defaults; a field that
    is present replaces the default list entirely.

    Args:
        path: Path to a JSON file shaped like ``SelectorTable``

    Returns:
        SelectorTable with overrides applied

    Raises:
        ConfigurationError: If the file is missing, not JSON, or has the wrong shape
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigurationError(f"Selector table not found: {path}", config_path=str(path))

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        table = SelectorTable.model_validate(data)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Selector table is not valid JSON: {e}", config_path=str(path)) from e
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid selector table: {e}", config_path=str(path)) from e

    LOGGER.debug(f"Loaded selector table from {path}")
    return table
