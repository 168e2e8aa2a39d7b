"""Marketplace product page extraction."""

import logging

from pagecapture.document import DocumentContext
from pagecapture.models import Category, ExtractedRecord
from pagecapture.patterns import catalog_id_from_url
from pagecapture.services.base import CategoryExtractor
from pagecapture.services.fields import extract_field, extract_field_or_last

LOGGER = logging.getLogger(__name__)


class CommerceExtractor(CategoryExtractor):
    """Extract title, price, rating, image and description from a product page."""

    category = Category.COMMERCE

    def extract_document(self, context: DocumentContext) -> ExtractedRecord:
        document = context.document
        table = self._selectors.commerce

        title = extract_field(document, table.title) or document.title
        price = extract_field(document, table.price)
        rating = extract_field(document, table.rating)
        image = extract_field(document, table.image)
        description = extract_field_or_last(document, table.description)
        catalog_id = catalog_id_from_url(context.url)

        if not price:
            LOGGER.debug(f"No price found on {context.url}")

        body = f"Price: {price or 'N/A'}\nRating: {rating or 'N/A'}\n\n{description}"
        return ExtractedRecord.build(
            Category.COMMERCE,
            title=title,
            body=body,
            price=price,
            rating=rating,
            catalogId=catalog_id,
            imageUrl=image,
        )
