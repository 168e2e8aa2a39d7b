"""Merging the user's text selection into an extracted record."""

import logging

from pagecapture.config import ExtractionSettings, get_settings
from pagecapture.models import Category, ExtractedRecord
from pagecapture.patterns import is_task_list

LOGGER = logging.getLogger(__name__)


def merge_selection(
    record: ExtractedRecord,
    selection: str | None,
    settings: ExtractionSettings | None = None,
) -> ExtractedRecord:
    """Combine a text selection with the extracted record.

    - No selection: the record is returned unchanged.
    - Task-list selection: the result is a ``text`` record whose body is the
      selection verbatim; the title falls back to the task-list title and the
      category metadata is dropped.
    - Any other selection: the selection is prepended to the body, separated by
      the selection delimiter. Category and metadata are kept.

    Args:
        record: Record extracted from the page
        selection: Text the user had selected (may be empty)
        settings: Optional settings (delimiter, task-list title)

    Returns:
        New merged record; the input record is not modified
    """
    if not selection:
        return record

    settings = settings or get_settings()

    if is_task_list(selection):
        LOGGER.debug("Selection looks like a task list")
        return ExtractedRecord(
            category=Category.TEXT,
            title=record.title or settings.task_list_title,
            body=selection,
        )

    body = f"{selection}{settings.selection_delimiter}{record.body}"
    return record.model_copy(update={"body": body}, deep=True)
