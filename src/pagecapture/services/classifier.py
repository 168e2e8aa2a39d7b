"""Site classification.

Decides which category extractor handles a page. Rules are checked in order
and the first match wins; anything unmatched is ``generic``.
"""

import logging
import re
from urllib.parse import urlparse

from pagecapture.document import Document
from pagecapture.models import Category

LOGGER = logging.getLogger(__name__)

COMMERCE_HOST_REGEX = re.compile(r"(^|\.)amazon\.", re.IGNORECASE)

# Known video platforms, by display name
VIDEO_HOSTS: dict[str, re.Pattern[str]] = {
    "YouTube": re.compile(r"(^|\.)(youtube\.com|youtu\.be)$", re.IGNORECASE),
    "Vimeo": re.compile(r"(^|\.)vimeo\.com$", re.IGNORECASE),
}

ARTICLE_CONTAINER = 'article, .post, .blog-post, [itemprop="blogPost"]'
VIDEO_ELEMENT = "video"


def hostname(url: str) -> str:
    """Lower-case hostname of a URL ("" when it has none)."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def video_platform(url: str) -> str | None:
    """Name of the known video platform serving ``url``, if any."""
    host = hostname(url)
    for name, host_regex in VIDEO_HOSTS.items():
        if host_regex.search(host):
            return name
    return None


def classify(url: str, document: Document) -> Category:
    """Classify a page into a content category.

    Order: marketplace host, video host, article container, embedded video
    element, generic.

    Args:
        url: Page URL
        document: Page snapshot

    Returns:
        Category for the page
    """
    host = hostname(url)

    if COMMERCE_HOST_REGEX.search(host):
        category = Category.COMMERCE
    elif video_platform(url):
        category = Category.VIDEO
    elif document.find(ARTICLE_CONTAINER) is not None:
        category = Category.ARTICLE
    elif document.find(VIDEO_ELEMENT) is not None:
        category = Category.VIDEO
    else:
        category = Category.GENERIC

    LOGGER.debug(f"Classified {url} as {category.value}")
    return category
