"""Pytest configuration and shared fixtures for pagecapture tests."""

import pytest

from pagecapture.config import ExtractionSettings


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests with no I/O")
    config.addinivalue_line("markers", "integration: Full pipeline tests, may touch the filesystem")
    config.addinivalue_line("markers", "e2e: End-to-end tests through the command line")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Apply default markers to tests without explicit markers.

    Tests should use explicit markers (@pytest.mark.unit, @pytest.mark.e2e).
    Unmarked tests default to unit.
    """
    for item in items:
        # Skip if already has a category marker
        markers = list(item.iter_markers())
        marker_names = [m.name for m in markers]
        if any(m in marker_names for m in ("unit", "integration", "e2e")):
            continue

        # Default unmarked tests to unit
        item.add_marker(pytest.mark.unit)


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


LONG_PARAGRAPH = (
    "The committee met on Tuesday to review the proposal in detail. Members raised "
    "concerns about the timeline, the budget and the staffing plan, and asked the "
    "authors to return with a revised draft before the end of the month. "
)


@pytest.fixture
def settings() -> ExtractionSettings:
    """Default settings, ignoring any local .env file."""
    return ExtractionSettings(_env_file=None)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def product_html() -> str:
    return """
    <html><head><title>Amazon.com: Widget</title></head>
    <body>
      <span id="productTitle">  Acme Widget, Blue  </span>
      <span class="a-price"><span class="a-offscreen">$24.50</span></span>
      <span id="acrPopover" title="4.6 out of 5 stars"></span>
      <img id="landingImage" src="https://images.example.com/widget.jpg">
      <div id="feature-bullets">
        <ul><li>Sturdy steel frame that holds up to forty kilograms</li>
        <li>Fits any standard shelf</li></ul>
      </div>
    </body></html>
    """


@pytest.fixture
def article_html() -> str:
    body = "".join(f"<p>{LONG_PARAGRAPH}</p>" for _ in range(3))
    return f"""
    <html><head><title>Committee delays vote | The Daily</title>
    <meta property="og:image" content="https://cdn.example.com/og.jpg"></head>
    <body>
      <nav><a href="/">Home</a><a href="/news">News</a></nav>
      <article>
        <h1>Committee delays vote</h1>
        <a rel="author" href="/staff/jo">Jo Reporter</a>
        <time datetime="2024-05-01">May 1, 2024</time>
        <img class="avatar" src="https://cdn.example.com/avatar.png">
        {body}
        <script>trackView();</script>
        <div class="ad">Buy now</div>
      </article>
    </body></html>
    """


@pytest.fixture
def generic_html() -> str:
    return f"""
    <html><head><title>Notes</title></head>
    <body>
      <header>Site header</header>
      <main><p>{LONG_PARAGRAPH}</p><p>{LONG_PARAGRAPH}</p></main>
      <footer>Copyright</footer>
    </body></html>
    """
