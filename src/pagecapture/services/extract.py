"""Extraction orchestration.

Classifies a page, runs the matching category extractor and merges the user's
selection into the result. Extraction always answers: any unexpected failure
produces a degraded generic response carrying the error instead of raising.
"""

import logging

from pagecapture.config import ExtractionSettings, get_settings
from pagecapture.document import DocumentContext, PageSource
from pagecapture.exceptions import generate_correlation_id
from pagecapture.models import Category, ExtractedRecord, ExtractionResponse
from pagecapture.selectors import SelectorTable
from pagecapture.services.article import ArticleExtractor
from pagecapture.services.base import CategoryExtractor
from pagecapture.services.classifier import classify
from pagecapture.services.commerce import CommerceExtractor
from pagecapture.services.generic import GenericExtractor
from pagecapture.services.selection import merge_selection
from pagecapture.services.video import Sleep, VideoExtractor
from pagecapture.utils import excerpt, log_with_correlation

LOGGER = logging.getLogger(__name__)


class ExtractService:
    """Turn a live page into an ``ExtractionResponse``.

    Usage:
        service = ExtractService()
        response = await service.extract(StaticPage(url, html))
        print(response.category, response.title)
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        selectors: SelectorTable | None = None,
        sleep: Sleep | None = None,
    ):
        """Initialize extract service.

        Args:
            settings: Optional settings (defaults to the environment)
            selectors: Optional selector table (defaults to the configured table)
            sleep: Optional async delay function for video waits
        """
        self._settings = settings or get_settings()
        self._selectors = selectors or self._settings.load_selectors()
        self._extractors: dict[Category, CategoryExtractor] = {
            Category.COMMERCE: CommerceExtractor(self._selectors, self._settings),
            Category.ARTICLE: ArticleExtractor(self._selectors, self._settings),
            Category.VIDEO: VideoExtractor(self._selectors, self._settings, sleep=sleep),
            Category.GENERIC: GenericExtractor(self._selectors, self._settings),
        }

    def extractor_for(self, category: Category) -> CategoryExtractor:
        """Extractor handling ``category`` (generic for anything without its own)."""
        return self._extractors.get(category, self._extractors[Category.GENERIC])

    async def extract(self, page: PageSource, selection: str | None = None) -> ExtractionResponse:
        """
        Extract the page's primary content.

        Args:
            page: Page to read
            selection: Selection to merge; defaults to the page's current selection

        Returns:
            ExtractionResponse; on failure a degraded generic response with
            ``error`` set
        """
        try:
            context = page.read()
            category = classify(context.url, context.document)
            record = await self.extractor_for(category).extract(page)
            if selection is None:
                selection = page.selection()
            record = merge_selection(record, selection, self._settings)
            return ExtractionResponse.from_record(record, page.url)
        except Exception as e:
            return self._degraded(page, e)

    def extract_document(self, context: DocumentContext, selection: str = "") -> ExtractionResponse:
        """
        Extract from a single snapshot without waiting or page interaction.

        Args:
            context: Page snapshot
            selection: Optional selection to merge

        Returns:
            ExtractionResponse for the snapshot
        """
        category = classify(context.url, context.document)
        record: ExtractedRecord = self.extractor_for(category).extract_document(context)
        record = merge_selection(record, selection, self._settings)
        return ExtractionResponse.from_record(record, context.url)

    def _degraded(self, page: PageSource, error: Exception) -> ExtractionResponse:
        """Best-effort response for a failed extraction."""
        correlation_id = generate_correlation_id()
        url = getattr(page, "url", "")
        log_with_correlation(
            LOGGER,
            logging.ERROR,
            f"Extraction failed for {url}: {error}",
            correlation_id=correlation_id,
            exc_info=True,
            error=str(error),
        )

        title, text = "", ""
        try:
            document = page.read().document
            title = document.title
            text = document.text()
        except Exception as e:
            LOGGER.debug(f"Page unreadable for degraded response [{correlation_id}]: {e}")

        return ExtractionResponse(
            category=Category.GENERIC,
            title=title,
            body=excerpt(text, self._settings.degraded_body_length),
            url=url,
            error=str(error) or type(error).__name__,
        )
