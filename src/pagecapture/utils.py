"""Utility functions for pagecapture."""

import logging
from typing import Any

from pagecapture.exceptions import generate_correlation_id


def log_with_correlation(
    logger: logging.Logger,
    level: int,
    message: str,
    correlation_id: str | None = None,
    exc_info: bool = False,
    **kwargs: Any,
) -> str:
    """
    Log a message with correlation ID and additional context.

    Args:
        logger: Logger instance to use.
        level: Logging level (e.g., logging.INFO, logging.ERROR).
        message: Log message format string.
        correlation_id: Optional correlation ID. If None, generates a new one.
        exc_info: Attach the exception currently being handled.
        **kwargs: Additional context to include in log extra fields.

    Returns:
        The correlation ID that was logged.
    """
    corr_id = correlation_id or generate_correlation_id()
    extra = {"correlation_id": corr_id, **kwargs}
    logger.log(level, message, exc_info=exc_info, extra=extra)
    return corr_id


def excerpt(text: str, length: int) -> str:
    """
    Leading ``length`` characters of ``text``.

    Args:
        text: Source text.
        length: Maximum characters kept.

    Returns:
        Prefix of the text, never longer than ``length``.
    """
    if length <= 0:
        return ""
    return text[:length]
