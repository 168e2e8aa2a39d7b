"""Tests for the document model and static pages."""

import pytest

from pagecapture.document import Document, StaticPage


class TestRenderedText:
    """Tests for innerText approximation."""

    def test_block_elements_break_lines(self):
        document = Document("<body><p>One</p><p>Two</p><div>Three<br>Four</div></body>")
        assert document.text() == "One\nTwo\nThree\nFour"

    def test_collapses_inline_whitespace(self):
        document = Document("<body><span>  lots   of\n\n space </span></body>")
        assert document.text() == "lots of space"

    def test_skips_scripts_styles_and_comments(self):
        html = "<body><p>Visible</p><script>var x = 1;</script><style>p{}</style><!-- hidden --></body>"
        assert Document(html).text() == "Visible"

    def test_preserves_line_breaks_in_preformatted_text(self):
        html = "<body><pre>line 1\n    line 2</pre></body>"
        assert Document(html).text() == "line 1\nline 2"

    def test_limits_blank_line_runs(self):
        html = "<body><p>A</p><div></div><div></div><div></div><p>B</p></body>"
        assert "\n\n\n" not in Document(html).text()

    def test_rendered_text_of_empty_tag(self):
        document = Document("<div id='x'></div>")
        element = document.find("#x")
        assert element is not None
        assert element.text() == ""


class TestDocument:
    """Tests for Document lookups."""

    def test_title(self):
        assert Document("<title> Hello </title>").title == "Hello"
        assert Document("<p>no title</p>").title == ""

    def test_find_missing_returns_none(self):
        assert Document("<p>x</p>").find("#nope") is None

    def test_invalid_locator_is_a_miss(self):
        document = Document("<p>x</p>")
        assert document.find("p[[") is None
        assert document.find_all("p[[") == []

    def test_meta_by_name_and_property(self):
        html = (
            '<head><meta name="description" content="About the page">'
            '<meta property="og:image" content="https://img.example.com/a.png"></head>'
        )
        document = Document(html)
        assert document.meta(name="description") == "About the page"
        assert document.meta(property="og:image") == "https://img.example.com/a.png"
        assert document.meta(name="keywords") == ""
        assert document.meta() == ""

    def test_scripts_filter_by_type(self):
        html = (
            '<script>var a = 1;</script>'
            '<script type="application/ld+json">{"@type": "VideoObject"}</script>'
            '<script src="/external.js"></script>'
        )
        document = Document(html)
        assert len(document.scripts()) == 2
        assert document.scripts(type_="application/ld+json") == ['{"@type": "VideoObject"}']

    def test_body_falls_back_to_whole_document(self):
        assert Document("<p>Fragment</p>").body().text() == "Fragment"


class TestElement:
    """Tests for Element accessors."""

    def test_attr_absent_is_empty_string(self):
        element = Document('<img src="a.png">').find("img")
        assert element.attr("src") == "a.png"
        assert element.attr("alt") == ""

    def test_attr_joins_multi_valued(self):
        element = Document('<div class="a b"></div>').find("div")
        assert element.attr("class") == "a b"

    def test_tag_name_is_lower_case(self):
        element = Document("<yt-formatted-string>x</yt-formatted-string>").find("yt-formatted-string")
        assert element.tag_name == "yt-formatted-string"

    def test_pruned_removes_matches_without_touching_original(self):
        document = Document("<article><p>Keep</p><nav>Drop</nav><script>drop()</script></article>")
        article = document.find("article")
        pruned = article.pruned(["nav", "script"])
        assert pruned.text() == "Keep"
        assert "Drop" in article.text()

    def test_pruned_handles_nested_matches(self):
        document = Document('<div id="root"><aside class="ad"><div class="ad">x</div></aside><p>Body</p></div>')
        pruned = document.find("#root").pruned(["aside", ".ad"])
        assert pruned.text() == "Body"

    def test_pruned_ignores_invalid_locator(self):
        document = Document("<div><p>Body</p></div>")
        assert document.find("div").pruned(["p[["]).text() == "Body"


class TestStaticPage:
    """Tests for the in-memory page."""

    def test_read_returns_fresh_snapshots(self):
        page = StaticPage("https://example.com", "<p>x</p>", embedded_state={"a": {"b": 1}})
        first = page.read()
        second = page.read()
        assert first.document is not second.document
        assert first.embedded_state == {"a": {"b": 1}}
        assert first.url == "https://example.com"

    def test_selection(self):
        assert StaticPage("https://example.com", "", selection="picked").selection() == "picked"

    @pytest.mark.asyncio
    async def test_activate_reveals_hidden_content(self):
        html = (
            "<ytd-expander><div id='content'><span>Short</span><span hidden>Full text</span></div>"
            "<button id='more'>Show more</button></ytd-expander>"
        )
        page = StaticPage("https://example.com", html)
        assert await page.activate("ytd-expander #more") is True
        document = page.read().document
        assert document.find("#more").attr("aria-expanded") == "true"
        assert document.find("[hidden]") is None
        assert page.activated == ["ytd-expander #more"]

    @pytest.mark.asyncio
    async def test_activate_missing_control(self):
        page = StaticPage("https://example.com", "<p>x</p>")
        assert await page.activate("#more") is False
        assert await page.activate("p[[") is False
        assert page.activated == []
