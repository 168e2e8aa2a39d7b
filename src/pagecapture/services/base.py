"""Common shape of the category extractors."""

from abc import ABC, abstractmethod
from typing import ClassVar

from pagecapture.config import ExtractionSettings, get_settings
from pagecapture.document import DocumentContext, PageSource
from pagecapture.models import Category, ExtractedRecord
from pagecapture.selectors import SelectorTable


class CategoryExtractor(ABC):
    """Turns a page into an ``ExtractedRecord`` for one category.

    Subclasses implement ``extract_document`` over a single snapshot. Extractors
    that need to interact with the page or wait for it override ``extract``.
    """

    category: ClassVar[Category]

    def __init__(
        self,
        selectors: SelectorTable | None = None,
        settings: ExtractionSettings | None = None,
    ):
        """Initialize extractor.

        Args:
            selectors: Optional selector table (defaults to the configured table)
            settings: Optional settings (defaults to the environment)
        """
        self._settings = settings or get_settings()
        self._selectors = selectors or self._settings.load_selectors()

    async def extract(self, page: PageSource) -> ExtractedRecord:
        """Extract a record from the page as it is now."""
        return self.extract_document(page.read())

    @abstractmethod
    def extract_document(self, context: DocumentContext) -> ExtractedRecord:
        """Extract a record from a single snapshot."""
