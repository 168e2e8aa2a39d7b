"""Read-only document model over a parsed HTML tree.

Extractors never touch BeautifulSoup directly. They resolve locators (CSS
selectors) through ``Document.find``/``find_all`` and read values through
``Element.text``/``Element.attr``, so the matching algorithms stay independent
of the concrete tree. A locator that is invalid or matches nothing is a miss,
never an error.

Pages are externally mutable: a ``PageSource`` hands out a fresh
``DocumentContext`` on every ``read()``, and callers re-read after any
suspension point instead of holding on to an old snapshot.
"""

import copy
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

LOGGER = logging.getLogger(__name__)

# Elements that start a new line in rendered text
BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "dd",
        "details",
        "dialog",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "summary",
        "table",
        "tr",
        "ul",
    }
)

# Elements whose content is never rendered as text
INVISIBLE_TAGS = frozenset({"script", "style", "noscript", "template", "head"})

_INLINE_WHITESPACE = re.compile(r"[ \t\r\f\v]+")
# Marks a block boundary; adjacent boundaries produce a single line break
_BLOCK_BREAK = "\x00"
_BLOCK_BREAKS = re.compile(r"\x00(?:\s*\x00)*")


def _collect_text(node: Tag, parts: list[str], preserve: bool = False) -> None:
    """Append rendered text of ``node``'s children to ``parts``."""
    for child in node.children:
        if isinstance(child, PreformattedString):
            # Comments, CDATA, doctype declarations
            continue
        if isinstance(child, NavigableString):
            text = str(child).replace(_BLOCK_BREAK, "")
            parts.append(text if preserve else re.sub(r"\s+", " ", text))
            continue
        if not isinstance(child, Tag) or child.name in INVISIBLE_TAGS or child.has_attr("hidden"):
            continue
        if child.name == "br":
            parts.append("\n")
            continue
        block = child.name in BLOCK_TAGS
        if block:
            parts.append(_BLOCK_BREAK)
        _collect_text(child, parts, preserve or child.name in ("pre", "textarea"))
        if block:
            parts.append(_BLOCK_BREAK)


def rendered_text(node: Tag) -> str:
    """Approximate the browser's ``innerText`` for a subtree.

    Block elements and ``<br>`` produce line breaks and runs of whitespace
    collapse to a single space. Invisible and ``hidden`` elements are skipped.
    Blank-line runs are limited to one empty line.

    Args:
        node: Tag to render.

    Returns:
        Rendered text, stripped.
    """
    parts: list[str] = []
    _collect_text(node, parts)
    joined = _BLOCK_BREAKS.sub("\n", "".join(parts))
    lines = [_INLINE_WHITESPACE.sub(" ", line).strip() for line in joined.split("\n")]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


class Element:
    """Read-only view of a single element."""

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def tag_name(self) -> str:
        """Lower-case tag name (e.g. ``yt-formatted-string``)."""
        return (self._tag.name or "").lower()

    def text(self) -> str:
        """Rendered text of the element (``innerText``)."""
        return rendered_text(self._tag)

    def text_content(self) -> str:
        """Raw concatenated text of the element (``textContent``)."""
        return self._tag.get_text()

    def attr(self, name: str) -> str:
        """Attribute value, or an empty string when absent.

        Multi-valued attributes such as ``class`` are joined with spaces.
        """
        value = self._tag.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def find(self, locator: str) -> "Element | None":
        """First descendant matching ``locator``."""
        return _select_one(self._tag, locator)

    def find_all(self, locator: str) -> list["Element"]:
        """All descendants matching ``locator``."""
        return _select(self._tag, locator)

    def pruned(self, locators: list[str] | tuple[str, ...]) -> "Element":
        """Return a detached copy with descendants matching ``locators`` removed.

        Args:
            locators: Selectors of non-content nodes (scripts, nav, ads).

        Returns:
            New Element; the original tree is left untouched.
        """
        clone = copy.copy(self._tag)
        for locator in locators:
            try:
                matches = clone.select(locator)
            except Exception as e:
                LOGGER.debug(f"Invalid locator {locator!r}: {e}")
                continue
            for match in matches:
                # Nested matches go with their decomposed ancestor
                if not match.decomposed:
                    match.decompose()
        return Element(clone)

    def __repr__(self) -> str:
        return f"Element(<{self.tag_name}>)"


def _select_one(root: Tag, locator: str) -> Element | None:
    try:
        tag = root.select_one(locator)
    except Exception as e:
        LOGGER.debug(f"Invalid locator {locator!r}: {e}")
        return None
    return Element(tag) if tag is not None else None


def _select(root: Tag, locator: str) -> list[Element]:
    try:
        tags = root.select(locator)
    except Exception as e:
        LOGGER.debug(f"Invalid locator {locator!r}: {e}")
        return []
    return [Element(tag) for tag in tags]


class Document:
    """Snapshot of a parsed HTML document.

    Usage:
        document = Document("<html><head><title>Hi</title></head>...</html>")
        heading = document.find("h1")
        if heading:
            print(heading.text())
    """

    def __init__(self, html: str):
        self.html = html
        self._soup = BeautifulSoup(html, "html.parser")

    @property
    def title(self) -> str:
        """Document title (``<title>``), or an empty string."""
        title_tag = self._soup.find("title")
        return title_tag.get_text(strip=True) if title_tag else ""

    def find(self, locator: str) -> Element | None:
        """First element matching ``locator``, or None."""
        return _select_one(self._soup, locator)

    def find_all(self, locator: str) -> list[Element]:
        """All elements matching ``locator`` in document order."""
        return _select(self._soup, locator)

    def body(self) -> Element:
        """The ``<body>`` element, or the whole document when there is none."""
        body = self._soup.find("body")
        return Element(body if isinstance(body, Tag) else self._soup)

    def meta(self, name: str | None = None, property: str | None = None) -> str:
        """Content of a meta tag looked up by ``name`` or ``property``.

        Returns:
            The ``content`` attribute, or an empty string.
        """
        if name:
            tag = self._soup.find("meta", attrs={"name": name})
        elif property:
            tag = self._soup.find("meta", attrs={"property": property})
        else:
            return ""
        if not isinstance(tag, Tag):
            return ""
        return Element(tag).attr("content")

    def scripts(self, type_: str | None = None) -> list[str]:
        """Raw text of inline script blocks.

        Args:
            type_: Optional script ``type`` to filter on (e.g. ``application/ld+json``).

        Returns:
            Script bodies in document order; external scripts yield empty strings
            and are skipped.
        """
        texts = []
        for script in self._soup.find_all("script"):
            if type_ is not None and (script.get("type") or "").lower() != type_:
                continue
            text = script.string if script.string is not None else script.get_text()
            if text:
                texts.append(str(text))
        return texts

    def text(self) -> str:
        """Rendered text of the whole body."""
        return self.body().text()


@dataclass
class DocumentContext:
    """Everything an extractor may read about the page at one point in time.

    Attributes:
        url: Current page URL
        document: Snapshot of the page markup
        embedded_state: Page state variables by name (e.g. ``ytInitialPlayerResponse``)
    """

    url: str
    document: Document
    embedded_state: Mapping[str, Any] = field(default_factory=dict)


class PageSource(Protocol):
    """A live page the extraction engine reads from.

    ``read`` must reflect the page as it is now; the engine calls it again
    after every wait because the page may have changed in between.
    """

    @property
    def url(self) -> str: ...

    def read(self) -> DocumentContext: ...

    def selection(self) -> str: ...

    async def activate(self, locator: str) -> bool: ...


class StaticPage:
    """In-memory page built from saved HTML.

    Usage:
        page = StaticPage(
            "https://www.youtube.com/watch?v=abc123",
            html,
            embedded_state={"ytInitialPlayerResponse": {...}},
            selection="- [ ] Buy milk",
        )
    """

    def __init__(
        self,
        url: str,
        html: str,
        embedded_state: Mapping[str, Any] | None = None,
        selection: str = "",
    ):
        """Initialize static page.

        Args:
            url: URL the page was loaded from
            html: Page markup
            embedded_state: Optional page state variables by name
            selection: Text the user had selected, if any
        """
        self._url = url
        self._html = html
        self._embedded_state = dict(embedded_state or {})
        self._selection = selection
        self._activated: list[str] = []

    @property
    def url(self) -> str:
        return self._url

    @property
    def activated(self) -> list[str]:
        """Locators activated so far, in order."""
        return list(self._activated)

    def read(self) -> DocumentContext:
        return DocumentContext(
            url=self._url,
            document=Document(self._html),
            embedded_state=dict(self._embedded_state),
        )

    def selection(self) -> str:
        return self._selection

    async def activate(self, locator: str) -> bool:
        """Simulate activating an expand control.

        Marks the control as expanded and reveals ``hidden`` elements inside its
        container, then stores the resulting markup so later reads see it.

        Returns:
            True if the locator resolved to an element.
        """
        soup = BeautifulSoup(self._html, "html.parser")
        try:
            control = soup.select_one(locator)
        except Exception as e:
            LOGGER.debug(f"Invalid locator {locator!r}: {e}")
            return False
        if control is None:
            return False

        control["aria-expanded"] = "true"
        container = control.parent if isinstance(control.parent, Tag) else soup
        for hidden in container.find_all(attrs={"hidden": True}):
            del hidden["hidden"]
        self._html = str(soup)
        self._activated.append(locator)
        LOGGER.debug(f"Activated {locator!r} on {self._url}")
        return True
