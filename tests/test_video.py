"""Tests for video page extraction."""

import json

import pytest

from pagecapture.config import ExtractionSettings
from pagecapture.document import Document, DocumentContext, StaticPage
from pagecapture.models import Category, VideoIdentity
from pagecapture.services.video import (
    DescriptionMerge,
    VideoExtractor,
    clean_description,
    initial_data_description,
    is_watch_page,
    player_details,
    recover_player_description,
)

WATCH_URL = "https://www.youtube.com/watch?v=abc123"
FULL_DESCRIPTION = "Full description of the current video. " * 5
STALE_DESCRIPTION = "Description of the video watched before this one. " * 5


def watch_html(title: str = "Current video - YouTube", head: str = "", body: str = "") -> str:
    return f"<html><head><title>{title}</title>{head}</head><body>{body}</body></html>"


def player_state(video_id: str, description: str, **details) -> dict:
    return {"videoDetails": {"videoId": video_id, "shortDescription": description, **details}}


def initial_data(video_id: str, *runs: str) -> dict:
    return {
        "currentVideoEndpoint": {"watchEndpoint": {"videoId": video_id}},
        "contents": {
            "twoColumnWatchNextResults": {
                "results": {
                    "results": {
                        "contents": [
                            {"videoPrimaryInfoRenderer": {}},
                            {"videoSecondaryInfoRenderer": {"description": {"runs": [{"text": r} for r in runs]}}},
                        ]
                    }
                }
            }
        },
    }


class LaggingPage(StaticPage):
    """Page whose player state only catches up after a number of reads."""

    def __init__(self, url: str, html: str, stale: dict, fresh: dict, lag: int):
        super().__init__(url, html, embedded_state=stale)
        self._fresh = fresh
        self._lag = lag
        self.reads = 0

    def read(self) -> DocumentContext:
        self.reads += 1
        context = super().read()
        if self.reads > self._lag:
            context.embedded_state = dict(self._fresh)
        return context


@pytest.fixture
def extractor(settings: ExtractionSettings, fake_sleep) -> VideoExtractor:
    return VideoExtractor(settings=settings, sleep=fake_sleep)


class TestHelpers:
    """Tests for description helpers."""

    def test_is_watch_page(self):
        assert is_watch_page(WATCH_URL)
        assert not is_watch_page("https://youtu.be/abc123")
        assert not is_watch_page("https://www.youtube.com/@channel")

    def test_merge_keeps_strictly_longer(self):
        merge = DescriptionMerge()
        assert merge.offer("abc", "first")
        assert not merge.offer("xyz", "second")
        assert not merge.offer("", "empty")
        assert not merge.offer(None, "none")
        assert merge.offer("abcd", "third")
        assert (merge.text, merge.source) == ("abcd", "third")

    def test_merge_satisfied(self):
        merge = DescriptionMerge()
        merge.offer("x" * 100, "state")
        assert merge.satisfied(100)
        assert not merge.satisfied(101)

    def test_player_details_identity(self):
        identity = VideoIdentity(id="abc123")
        assert player_details(player_state("abc123", "d"), identity)["shortDescription"] == "d"
        assert player_details(player_state("xyz999", "d"), identity) is None
        assert player_details({"videoDetails": {"shortDescription": "d"}}, identity) is None
        assert player_details(player_state("xyz999", "d"), None)["videoId"] == "xyz999"
        assert player_details("not a dict", identity) is None

    def test_initial_data_description_joins_runs(self):
        data = initial_data("abc123", "Part one. ", "Part two.")
        assert initial_data_description(data, VideoIdentity(id="abc123")) == "Part one. Part two."

    def test_initial_data_description_rejects_stale(self):
        data = initial_data("xyz999", "Old text")
        assert initial_data_description(data, VideoIdentity(id="abc123")) is None

    def test_initial_data_without_endpoint_needs_id_mention(self):
        data = initial_data("abc123", "Text")
        del data["currentVideoEndpoint"]
        assert initial_data_description(data, VideoIdentity(id="abc123")) is None
        data["playlist"] = {"videoId": "abc123"}
        assert initial_data_description(data, VideoIdentity(id="abc123")) == "Text"

    def test_initial_data_attributed_description(self):
        data = initial_data("abc123")
        renderer = data["contents"]["twoColumnWatchNextResults"]["results"]["results"]["contents"][1]
        renderer["videoSecondaryInfoRenderer"] = {"attributedDescription": {"content": "Attributed"}}
        assert initial_data_description(data, VideoIdentity(id="abc123")) == "Attributed"

    def test_recover_player_description_checks_identity(self):
        script = (
            'var ytInitialPlayerResponse = {"videoDetails": {"videoId":"abc123",'
            '"shortDescription":"Recovered\\ntext",'
        )
        assert recover_player_description(script, VideoIdentity(id="abc123")) == "Recovered\ntext"
        assert recover_player_description(script, VideoIdentity(id="other")) is None
        assert recover_player_description(script, None) == "Recovered\ntext"

    def test_recovered_identity_comes_from_video_details(self):
        script = (
            'var ytInitialData = {"contents": [{"videoId": "related1"}]};'
            'var ytInitialPlayerResponse = {"videoDetails": {"videoId": "abc123", '
            '"shortDescription": "Recovered text", }, broken;'
        )
        assert recover_player_description(script, VideoIdentity(id="abc123")) == "Recovered text"

    def test_recovery_without_video_details_is_rejected(self):
        script = '{"videoId": "abc123", "shortDescription": "No details block", broken'
        assert recover_player_description(script, VideoIdentity(id="abc123")) is None

    def test_clean_description(self):
        text = "First line   Show more\n\n\n\nSecond line\nShow less"
        assert clean_description(text) == "First line\n\nSecond line"


class TestIdentityPolling:
    """Tests for waiting on the player state after navigation."""

    @pytest.mark.asyncio
    async def test_matching_state_stops_polling(self, extractor, fake_sleep):
        page = StaticPage(WATCH_URL, watch_html(), {"ytInitialPlayerResponse": player_state("abc123", "d")})
        assert await extractor.wait_for_identity(page) is True
        assert fake_sleep.calls == [0.5]

    @pytest.mark.asyncio
    async def test_polling_is_bounded(self, extractor, fake_sleep):
        page = StaticPage(WATCH_URL, watch_html(), {"ytInitialPlayerResponse": player_state("xyz999", "d")})
        assert await extractor.wait_for_identity(page) is False
        assert fake_sleep.calls == [0.5] + [0.2] * 10

    @pytest.mark.asyncio
    async def test_state_catches_up(self, extractor, fake_sleep):
        page = LaggingPage(
            WATCH_URL,
            watch_html(),
            stale={"ytInitialPlayerResponse": player_state("xyz999", STALE_DESCRIPTION)},
            fresh={"ytInitialPlayerResponse": player_state("abc123", FULL_DESCRIPTION)},
            lag=3,
        )
        assert await extractor.wait_for_identity(page) is True
        assert fake_sleep.calls == [0.5, 0.2, 0.2, 0.2]

    @pytest.mark.asyncio
    async def test_extract_reads_after_state_catches_up(self, extractor):
        page = LaggingPage(
            WATCH_URL,
            watch_html(),
            stale={"ytInitialPlayerResponse": player_state("xyz999", STALE_DESCRIPTION)},
            fresh={"ytInitialPlayerResponse": player_state("abc123", FULL_DESCRIPTION)},
            lag=2,
        )
        record = await extractor.extract(page)
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()

    @pytest.mark.asyncio
    async def test_custom_poll_settings(self, fake_sleep):
        settings = ExtractionSettings(_env_file=None, identity_poll_attempts=2, identity_poll_interval=0.05)
        extractor = VideoExtractor(settings=settings, sleep=fake_sleep)
        page = StaticPage(WATCH_URL, watch_html())
        assert await extractor.wait_for_identity(page) is False
        assert fake_sleep.calls == [0.5, 0.05, 0.05]

    @pytest.mark.asyncio
    async def test_short_links_are_not_polled(self, extractor, fake_sleep):
        page = StaticPage("https://youtu.be/abc123", watch_html())
        await extractor.extract(page)
        assert fake_sleep.calls == []


class TestYouTubeDescription:
    """Tests for description source selection."""

    @pytest.mark.asyncio
    async def test_player_state_description(self, extractor):
        state = {"ytInitialPlayerResponse": player_state("abc123", FULL_DESCRIPTION, title="State title", author="Chan")}
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(), state))

        assert record.category == Category.VIDEO
        assert record.metadata["platform"] == "YouTube"
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()
        assert record.metadata["channel"] == "Chan"
        assert record.metadata["thumbnailUrl"] == "https://img.youtube.com/vi/abc123/maxresdefault.jpg"
        assert record.title == "State title"
        assert record.body == f"Platform: YouTube\nChannel: Chan\n\n\nDescription:\n{FULL_DESCRIPTION.strip()}"

    @pytest.mark.asyncio
    async def test_stale_state_is_never_selected(self, extractor):
        state = {
            "ytInitialPlayerResponse": player_state("xyz999", STALE_DESCRIPTION, title="Old video"),
            "ytInitialData": initial_data("xyz999", STALE_DESCRIPTION),
        }
        html = watch_html(head='<meta name="description" content="Fallback text">')
        record = await extractor.extract(StaticPage(WATCH_URL, html, state))

        assert record.metadata["description"] == "Fallback text"
        assert record.title == "Current video - YouTube"
        assert "watched before" not in record.body

    @pytest.mark.asyncio
    async def test_longer_initial_data_beats_short_player_state(self, extractor):
        state = {
            "ytInitialPlayerResponse": player_state("abc123", "Short."),
            "ytInitialData": initial_data("abc123", FULL_DESCRIPTION),
        }
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(), state))
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()

    @pytest.mark.asyncio
    async def test_equal_length_keeps_player_state(self, extractor):
        state = {
            "ytInitialPlayerResponse": player_state("abc123", "A" * 120),
            "ytInitialData": initial_data("abc123", "B" * 120),
        }
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(), state))
        assert record.metadata["description"] == "A" * 120

    @pytest.mark.asyncio
    async def test_longest_valid_candidate_wins(self, extractor):
        ld = json.dumps({"@type": "VideoObject", "description": "L" * 90})
        head = f'<meta name="description" content="{"M" * 80}"><script type="application/ld+json">{ld}</script>'
        state = {
            "ytInitialPlayerResponse": player_state("abc123", "P" * 5),
            "ytInitialData": initial_data("abc123", "I" * 50),
        }
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(head=head), state))
        assert record.metadata["description"] == "L" * 90

    @pytest.mark.asyncio
    async def test_lower_tiers_skipped_once_long_enough(self, extractor):
        head = f'<meta name="description" content="{"M" * 300}">'
        state = {"ytInitialPlayerResponse": player_state("abc123", FULL_DESCRIPTION)}
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(head=head), state))
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()

    @pytest.mark.asyncio
    async def test_script_payload(self, extractor):
        payload = json.dumps(player_state("abc123", FULL_DESCRIPTION))
        body = f"<script>var ytInitialPlayerResponse = {payload};var meta = 1;</script>"
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(body=body)))
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()

    @pytest.mark.asyncio
    async def test_malformed_script_falls_back_to_pattern(self, extractor):
        body = (
            '<script>var ytInitialPlayerResponse = {"videoDetails": {"videoId": "abc123", '
            '"shortDescription": "Recovered line one.\\nRecovered line two.", }, broken;</script>'
        )
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(body=body)))
        assert record.metadata["description"] == "Recovered line one.\nRecovered line two."

    @pytest.mark.asyncio
    async def test_malformed_stale_script_is_rejected(self, extractor):
        body = (
            '<script>var ytInitialPlayerResponse = {"videoDetails": {"videoId": "xyz999", '
            '"shortDescription": "Stale recovered text", }, broken;</script>'
        )
        html = watch_html(head='<meta name="description" content="Meta text">', body=body)
        record = await extractor.extract(StaticPage(WATCH_URL, html))
        assert record.metadata["description"] == "Meta text"

    @pytest.mark.asyncio
    async def test_show_more_is_activated(self, extractor, fake_sleep):
        body = (
            "<ytd-expander>"
            '<div id="content"><yt-formatted-string>Intro line</yt-formatted-string>'
            f"<p hidden>{FULL_DESCRIPTION}</p></div>"
            '<tp-yt-paper-button id="more">Show more</tp-yt-paper-button>'
            "</ytd-expander>"
        )
        page = StaticPage(WATCH_URL, watch_html(body=body))
        record = await extractor.extract(page)

        assert page.activated == ["ytd-expander #more"]
        assert fake_sleep.calls[-1] == 0.5
        assert record.metadata["description"].startswith("Intro line\n")
        assert "Full description of the current video." in record.metadata["description"]
        assert "Show more" not in record.metadata["description"]

    @pytest.mark.asyncio
    async def test_control_without_more_label_is_not_activated(self, extractor):
        body = '<ytd-expander><div id="content">Text</div><button id="more">Subscribe</button></ytd-expander>'
        page = StaticPage(WATCH_URL, watch_html(body=body))
        record = await extractor.extract(page)
        assert page.activated == []
        assert record.metadata["description"] == "Text"

    @pytest.mark.asyncio
    async def test_accessibility_label_used_when_longer(self, extractor):
        body = f'<yt-formatted-string id="description-text" aria-label="{FULL_DESCRIPTION}">Short</yt-formatted-string>'
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(body=body)))
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()

    @pytest.mark.asyncio
    async def test_linked_data_graph(self, extractor):
        ld = json.dumps({"@graph": [{"@type": "WebPage"}, {"@type": "VideoObject", "description": "From graph"}]})
        html = watch_html(head=f'<script type="application/ld+json">{ld}</script>')
        record = await extractor.extract(StaticPage(WATCH_URL, html))
        assert record.metadata["description"] == "From graph"

    @pytest.mark.asyncio
    async def test_nothing_found(self, extractor):
        head = '<meta property="og:image" content="https://i.ytimg.com/vi/abc123/hq.jpg">'
        body = '<div id="channel-name"><a href="/@chan">The Channel</a></div>'
        record = await extractor.extract(StaticPage(WATCH_URL, watch_html(head=head, body=body)))
        assert record.metadata["description"] is None
        assert record.metadata["channel"] == "The Channel"
        assert record.metadata["thumbnailUrl"] == "https://i.ytimg.com/vi/abc123/hq.jpg"
        assert record.body == "Platform: YouTube\nChannel: The Channel"

    def test_extract_document_without_interaction(self, settings):
        state = {"ytInitialPlayerResponse": player_state("abc123", FULL_DESCRIPTION)}
        context = DocumentContext(url=WATCH_URL, document=Document(watch_html()), embedded_state=state)
        record = VideoExtractor(settings=settings).extract_document(context)
        assert record.metadata["description"] == FULL_DESCRIPTION.strip()


class TestOtherPlatforms:
    """Tests for Vimeo and embedded video pages."""

    def test_vimeo(self, settings):
        html = (
            '<head><title>Clip on Vimeo</title><meta property="og:image" content="https://i.vimeocdn.com/t.jpg"></head>'
            '<body><h1>Mountain timelapse</h1><div class="description">Shot over three nights.</div></body>'
        )
        context = DocumentContext(url="https://vimeo.com/12345", document=Document(html))
        record = VideoExtractor(settings=settings).extract_document(context)
        assert record.title == "Mountain timelapse"
        assert record.metadata["platform"] == "Vimeo"
        assert record.metadata["thumbnailUrl"] == "https://i.vimeocdn.com/t.jpg"
        assert record.metadata["description"] == "Shot over three nights."
        assert record.metadata["channel"] is None

    @pytest.mark.asyncio
    async def test_embedded_video(self, extractor, fake_sleep):
        html = '<title>Demo</title><video src="demo.mp4" poster="https://example.com/poster.jpg"></video>'
        record = await extractor.extract(StaticPage("https://example.com/demo", html))
        assert record.title == "Demo"
        assert record.metadata["platform"] == "Video"
        assert record.metadata["thumbnailUrl"] == "https://example.com/poster.jpg"
        assert record.body == "Platform: Video"
        assert fake_sleep.calls == []
