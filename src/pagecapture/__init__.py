"""pagecapture: typed content records from web pages.

Classifies a page as commerce, article, video or generic content, extracts a
record with category-specific metadata, and merges in the user's selection.
"""

from pagecapture.document import Document, DocumentContext, PageSource, StaticPage
from pagecapture.models import Category, ExtractedRecord, ExtractionResponse

__version__ = "0.1.0"

__all__ = [
    "Category",
    "Document",
    "DocumentContext",
    "ExtractedRecord",
    "ExtractionResponse",
    "PageSource",
    "StaticPage",
    "__version__",
]
