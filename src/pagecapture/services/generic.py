"""Generic page extraction with bounded output."""

import logging

from pagecapture.document import DocumentContext
from pagecapture.models import Category, ExtractedRecord
from pagecapture.services.base import CategoryExtractor
from pagecapture.services.fields import extract_field

LOGGER = logging.getLogger(__name__)


def truncate(text: str, max_length: int, marker: str) -> str:
    """Cut ``text`` to ``max_length`` characters and append ``marker``.

    Text at or under the limit is returned unchanged, so a trailing marker is
    the only reliable truncation signal.

    Args:
        text: Text to bound
        max_length: Maximum characters kept
        marker: Suffix appended when text was cut

    Returns:
        Original or truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length] + marker


class GenericExtractor(CategoryExtractor):
    """Extract the main content of an arbitrary page."""

    category = Category.GENERIC

    def extract_document(self, context: DocumentContext) -> ExtractedRecord:
        document = context.document
        table = self._selectors.generic
        settings = self._settings

        content = extract_field(document, table.body)
        if len(content) < settings.generic_fallback_min_length:
            LOGGER.debug(f"No content container on {context.url}, using page body")
            content = document.body().pruned(table.fallback_prune).text()

        content = truncate(content, settings.max_body_length, settings.truncation_marker)
        return ExtractedRecord.build(Category.GENERIC, title=document.title, body=content)
