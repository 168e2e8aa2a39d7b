"""Article and blog post extraction."""

import logging

from pagecapture.document import DocumentContext
from pagecapture.models import Category, ExtractedRecord
from pagecapture.services.base import CategoryExtractor
from pagecapture.services.fields import extract_field, extract_field_or_last

LOGGER = logging.getLogger(__name__)


def _is_content_image(url: str) -> bool:
    """Reject author avatars picked up by the image chain."""
    return "avatar" not in url.lower()


class ArticleExtractor(CategoryExtractor):
    """Extract title, author, date, featured image and prose body.

    Body candidates are pruned of scripts, navigation and ads before their
    length is measured, so a short teaser wrapped in markup noise does not beat
    the full body further down the chain.
    """

    category = Category.ARTICLE

    def extract_document(self, context: DocumentContext) -> ExtractedRecord:
        document = context.document
        table = self._selectors.article

        title = extract_field(document, table.title) or document.title
        author = extract_field(document, table.author)
        published = extract_field(document, table.published_date)
        image = extract_field(document, table.image, accept=_is_content_image)
        body = extract_field_or_last(document, table.body)

        LOGGER.debug(f"Article body for {context.url}: {len(body)} chars")
        return ExtractedRecord.build(
            Category.ARTICLE,
            title=title,
            body=body,
            author=author,
            publishedDate=published,
            imageUrl=image,
        )
