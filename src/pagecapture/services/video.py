"""Video page extraction.

A video's description can live in several places that disagree about how
complete and how current they are. Sources are read in trust order and the
longest valid text wins:

1. Player response state (``ytInitialPlayerResponse.videoDetails``)
2. Initial data state (secondary info renderer description runs)
3. Inline script payloads for the same two variables, JSON-decoded, with a
   regex recovery of ``shortDescription`` when the payload is malformed
4. The visible description region, after clicking "show more"
5. The meta description, then linked data

Tiers 1 and 2 are always read. Later tiers are skipped once the description
reaches ``description_target_length`` characters.

Stale state: after client-side navigation the page may still carry the
previous video's state. Any source whose embedded video ID disagrees with the
ID in the current URL is rejected, however long its text. Before reading a
watch page the extractor polls the player state for a bounded number of
attempts until its ID matches the URL.
"""

import asyncio
import json
import logging
import re
from collections.abc import Awaitable, Callable, Iterator, Mapping
from typing import Any, TypeAlias
from urllib.parse import urlparse

from pagecapture.config import ExtractionSettings
from pagecapture.document import Document, DocumentContext, Element, PageSource
from pagecapture.exceptions import EmbeddedStateError
from pagecapture.models import Category, ExtractedRecord, VideoIdentity
from pagecapture.patterns import dig, find_state_payload, recover_string_field, video_identity
from pagecapture.selectors import SelectorTable
from pagecapture.services.base import CategoryExtractor
from pagecapture.services.classifier import video_platform
from pagecapture.services.fields import extract_field

LOGGER = logging.getLogger(__name__)

Sleep: TypeAlias = Callable[[float], Awaitable[None]]

PLAYER_RESPONSE = "ytInitialPlayerResponse"
INITIAL_DATA = "ytInitialData"

WATCH_CONTENTS_PATH = ("contents", "twoColumnWatchNextResults", "results", "results", "contents")
THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

_EXPAND_LABELS = re.compile(r"\b(?:Show more|Show less)\b", re.IGNORECASE)


def is_watch_page(url: str) -> bool:
    """Check whether a URL is a YouTube watch page."""
    try:
        return urlparse(url).path.startswith("/watch")
    except ValueError:
        return False


class DescriptionMerge:
    """Keeps the longest description offered so far.

    A later source replaces the current value only with strictly longer text,
    so ties go to the more trusted source.
    """

    def __init__(self) -> None:
        self.text = ""
        self.source: str | None = None

    def offer(self, text: str | None, source: str) -> bool:
        """Offer a candidate; returns True if it replaced the current value."""
        if not text or not isinstance(text, str):
            return False
        text = text.strip()
        if len(text) <= len(self.text):
            return False
        self.text = text
        self.source = source
        LOGGER.debug(f"Description from {source}: {len(text)} chars")
        return True

    def satisfied(self, target: int) -> bool:
        """Check whether the description is long enough to stop looking."""
        return len(self.text) >= target


# =============================================================================
# Embedded State Readers
# =============================================================================


def player_details(player: Any, identity: VideoIdentity | None) -> Mapping[str, Any] | None:
    """Return ``videoDetails`` from a player response if it belongs to ``identity``.

    With no URL identity there is nothing to disagree with and the details are
    used as they are.
    """
    details = dig(player, "videoDetails")
    if not isinstance(details, dict):
        return None
    if identity is not None and details.get("videoId") != identity.id:
        LOGGER.debug(f"Rejected stale player state for {details.get('videoId')!r} (page is {identity.id!r})")
        return None
    return details


def initial_data_matches(data: Any, identity: VideoIdentity | None) -> bool:
    """Check that initial data describes the video in the URL.

    Prefers the current watch endpoint ID; otherwise requires the ID to appear
    somewhere in the state.
    """
    if identity is None:
        return True
    endpoint_id = dig(data, "currentVideoEndpoint", "watchEndpoint", "videoId")
    if isinstance(endpoint_id, str):
        return endpoint_id == identity.id
    try:
        return identity.id in json.dumps(data)
    except (TypeError, ValueError):
        return False


def initial_data_description(data: Any, identity: VideoIdentity | None) -> str | None:
    """Compose the full description from initial data, if identity-consistent."""
    if not isinstance(data, dict):
        return None
    if not initial_data_matches(data, identity):
        LOGGER.debug(f"Rejected stale initial data (page is {identity.id if identity else None!r})")
        return None

    contents = dig(data, *WATCH_CONTENTS_PATH)
    if not isinstance(contents, list):
        return None
    for item in contents:
        renderer = dig(item, "videoSecondaryInfoRenderer")
        if not isinstance(renderer, dict):
            continue
        runs = dig(renderer, "description", "runs")
        if isinstance(runs, list):
            return "".join(run.get("text", "") for run in runs if isinstance(run, dict))
        attributed = dig(renderer, "attributedDescription", "content")
        if isinstance(attributed, str):
            return attributed
    return None


def recover_player_description(script: str, identity: VideoIdentity | None) -> str | None:
    """Regex recovery of ``shortDescription`` from a malformed player payload.

    The payload's own ``videoId`` must agree with the URL, same as decoded state.
    """
    if identity is not None:
        recovered_id = recover_string_field(script, "videoId", after="videoDetails")
        if recovered_id != identity.id:
            LOGGER.debug(f"Rejected recovered description for {recovered_id!r} (page is {identity.id!r})")
            return None
    return recover_string_field(script, "shortDescription")


def _linked_data_nodes(data: Any) -> Iterator[Mapping[str, Any]]:
    if isinstance(data, list):
        for item in data:
            yield from _linked_data_nodes(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from _linked_data_nodes(graph)


def clean_description(text: str) -> str:
    """Strip expand/collapse labels and collapse blank-line runs."""
    text = _EXPAND_LABELS.sub("", text)
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def _label_or_text(element: Element) -> str:
    text = element.text() or element.text_content()
    label = element.attr("aria-label")
    return label if len(label) > len(text) else text


def region_text(element: Element) -> str:
    """Resolved text of a description region.

    Formatted-string nodes may hold the full text only in their accessibility
    label; whichever is longer is used. For containers, the joined text of their
    formatted strings replaces the container text when longer.
    """
    if element.tag_name == "yt-formatted-string":
        return clean_description(_label_or_text(element))

    text = element.text() or element.text_content()
    parts = [part for part in (_label_or_text(s) for s in element.find_all("yt-formatted-string")) if part.strip()]
    if parts:
        combined = "\n".join(parts)
        if len(combined) > len(text):
            text = combined
    return clean_description(text)


def _is_expand_control(element: Element) -> bool:
    return "show more" in element.text_content().lower() or "more" in element.attr("aria-label").lower()


class VideoExtractor(CategoryExtractor):
    """Extract title, channel, thumbnail and description from a video page.

    Usage:
        extractor = VideoExtractor()
        record = await extractor.extract(page)
        print(record.metadata["description"])

        # Tests replace the delay function
        extractor = VideoExtractor(sleep=fake_sleep)
    """

    category = Category.VIDEO

    def __init__(
        self,
        selectors: SelectorTable | None = None,
        settings: ExtractionSettings | None = None,
        sleep: Sleep | None = None,
    ):
        """Initialize video extractor.

        Args:
            selectors: Optional selector table
            settings: Optional settings (poll attempts, delays, target length)
            sleep: Optional async delay function (defaults to asyncio.sleep)
        """
        super().__init__(selectors, settings)
        self._sleep = sleep or asyncio.sleep

    async def extract(self, page: PageSource) -> ExtractedRecord:
        if video_platform(page.url) != "YouTube":
            return self.extract_document(page.read())

        if is_watch_page(page.url):
            await self.wait_for_identity(page)

        context = page.read()
        identity = video_identity(context.url)
        merge = DescriptionMerge()
        target = self._settings.description_target_length

        self._read_internal_state(context, identity, merge)
        if not merge.satisfied(target):
            self._read_scripts(context.document, identity, merge)
        if not merge.satisfied(target):
            if await self._expand_description(page, context.document):
                # The page changed while we waited
                context = page.read()
            self._read_regions(context.document, merge)
        if not merge.satisfied(target):
            self._read_last_resort(context.document, merge, target)

        return self._youtube_record(context, identity, merge.text)

    def extract_document(self, context: DocumentContext) -> ExtractedRecord:
        """Extract from a single snapshot, without page interaction."""
        platform = video_platform(context.url)
        if platform == "YouTube":
            return self._youtube_record(context, video_identity(context.url), self.collect_description(context))
        if platform == "Vimeo":
            return self._vimeo_record(context)
        return self._embedded_record(context)

    async def wait_for_identity(self, page: PageSource) -> bool:
        """Wait until the player state describes the video in the URL.

        Waits ``settle_delay`` once, then polls up to ``identity_poll_attempts``
        times, ``identity_poll_interval`` apart.

        Returns:
            True if the state caught up, False if attempts ran out.
        """
        settings = self._settings
        await self._sleep(settings.settle_delay)

        for attempt in range(settings.identity_poll_attempts):
            context = page.read()
            identity = video_identity(context.url)
            state_id = dig(context.embedded_state.get(PLAYER_RESPONSE), "videoDetails", "videoId")
            if state_id and (identity is None or state_id == identity.id):
                LOGGER.debug(f"Player state matched after {attempt + 1} poll(s)")
                return True
            await self._sleep(settings.identity_poll_interval)

        LOGGER.debug(f"Player state never matched {page.url}, continuing with what is available")
        return False

    def collect_description(self, context: DocumentContext) -> str:
        """Run every non-interactive description tier over one snapshot."""
        identity = video_identity(context.url)
        merge = DescriptionMerge()
        target = self._settings.description_target_length

        self._read_internal_state(context, identity, merge)
        if not merge.satisfied(target):
            self._read_scripts(context.document, identity, merge)
        if not merge.satisfied(target):
            self._read_regions(context.document, merge)
        if not merge.satisfied(target):
            self._read_last_resort(context.document, merge, target)
        return merge.text

    # -------------------------------------------------------------------------
    # Tiers
    # -------------------------------------------------------------------------

    def _read_internal_state(
        self, context: DocumentContext, identity: VideoIdentity | None, merge: DescriptionMerge
    ) -> None:
        details = player_details(context.embedded_state.get(PLAYER_RESPONSE), identity)
        if details:
            merge.offer(details.get("shortDescription"), "player state")
        merge.offer(initial_data_description(context.embedded_state.get(INITIAL_DATA), identity), "initial data")

    def _read_scripts(self, document: Document, identity: VideoIdentity | None, merge: DescriptionMerge) -> None:
        target = self._settings.description_target_length
        for script in document.scripts():
            if "shortDescription" not in script and PLAYER_RESPONSE not in script and INITIAL_DATA not in script:
                continue

            try:
                player = find_state_payload(script, PLAYER_RESPONSE)
            except EmbeddedStateError as e:
                LOGGER.debug(f"{e.message}, recovering shortDescription by pattern")
                merge.offer(recover_player_description(script, identity), "script (recovered)")
            else:
                details = player_details(player, identity) if player is not None else None
                if details:
                    merge.offer(details.get("shortDescription"), "script player state")

            if merge.satisfied(target):
                return

            try:
                data = find_state_payload(script, INITIAL_DATA)
            except EmbeddedStateError as e:
                LOGGER.debug(e.message)
                continue
            merge.offer(initial_data_description(data, identity), "script initial data")

            if merge.satisfied(target):
                return

    async def _expand_description(self, page: PageSource, document: Document) -> bool:
        """Activate the first genuine "show more" control and wait for it."""
        for locator in self._selectors.video.expand_controls:
            control = document.find(locator)
            if control is None or not _is_expand_control(control):
                continue
            try:
                activated = await page.activate(locator)
            except Exception as e:
                LOGGER.debug(f"Could not expand description via {locator!r}: {e}")
                continue
            if activated:
                await self._sleep(self._settings.expand_wait)
                return True
        return False

    def _read_regions(self, document: Document, merge: DescriptionMerge) -> None:
        best = ""
        for locator in self._selectors.video.description_regions:
            element = document.find(locator)
            if element is None:
                continue
            text = region_text(element)
            if len(text) > len(best):
                best = text
        merge.offer(best, "description region")

    def _read_last_resort(self, document: Document, merge: DescriptionMerge, target: int) -> None:
        merge.offer(document.meta(name="description"), "meta description")
        if merge.satisfied(target):
            return

        for script in document.scripts(type_="application/ld+json"):
            try:
                data = json.loads(script)
            except json.JSONDecodeError as e:
                LOGGER.debug(f"Could not parse linked data: {e}")
                continue
            for node in _linked_data_nodes(data):
                description = node.get("description")
                if not isinstance(description, str):
                    description = dig(node, "videoDetails", "shortDescription")
                merge.offer(description, "linked data")

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def _youtube_record(
        self, context: DocumentContext, identity: VideoIdentity | None, description: str
    ) -> ExtractedRecord:
        document = context.document
        table = self._selectors.video
        details = player_details(context.embedded_state.get(PLAYER_RESPONSE), identity) or {}

        title = extract_field(document, table.title) or str(details.get("title") or "") or document.title
        channel = extract_field(document, table.channel) or str(details.get("author") or "")
        thumbnail = extract_field(document, table.thumbnail)
        if not thumbnail and identity is not None:
            thumbnail = THUMBNAIL_URL.format(video_id=identity.id)

        return self._record("YouTube", title, channel, thumbnail, description)

    def _vimeo_record(self, context: DocumentContext) -> ExtractedRecord:
        document = context.document
        table = self._selectors.video
        title = extract_field(document, table.vimeo_title) or document.title
        thumbnail = extract_field(document, table.thumbnail)
        description = extract_field(document, table.vimeo_description)
        return self._record("Vimeo", title, "", thumbnail, description)

    def _embedded_record(self, context: DocumentContext) -> ExtractedRecord:
        document = context.document
        if document.find("video") is None:
            return self._record("", document.title, "", "", "")
        poster = extract_field(document, self._selectors.video.player)
        return self._record("Video", document.title, "", poster, "")

    @staticmethod
    def _record(platform: str, title: str, channel: str, thumbnail: str, description: str) -> ExtractedRecord:
        parts = [f"Platform: {platform}"]
        if channel:
            parts.append(f"Channel: {channel}")
        if description:
            parts.append(f"\n\nDescription:\n{description}")
        return ExtractedRecord.build(
            Category.VIDEO,
            title=title,
            body="\n".join(parts),
            platform=platform,
            channel=channel,
            thumbnailUrl=thumbnail,
            description=description,
        )
