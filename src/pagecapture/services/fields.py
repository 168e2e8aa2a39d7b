"""Selector-chain field extraction.

Every category extractor is built from this one mechanism: walk an ordered
list of ``FieldCandidate`` entries, resolve each locator, read it with its
accessor, and return the first value that is accepted. A locator that
matches nothing is a chain miss, not an error.
"""

import logging
from collections.abc import Callable, Sequence
from typing import TypeAlias

from pagecapture.document import Document, Element
from pagecapture.selectors import FieldCandidate

LOGGER = logging.getLogger(__name__)

Predicate: TypeAlias = Callable[[str], bool]


def read_candidate(document: Document, candidate: FieldCandidate) -> str:
    """Resolve a single candidate to its trimmed value ("" on a miss)."""
    element = document.find(candidate.locator)
    if element is None:
        return ""
    return read_element(element, candidate)


def read_element(element: Element, candidate: FieldCandidate) -> str:
    """Read a candidate's value from an already resolved element."""
    if candidate.prune:
        element = element.pruned(candidate.prune)
    try:
        value = candidate.accessor.read(element)
    except Exception as e:
        LOGGER.debug(f"Accessor failed for {candidate.locator!r}: {e}")
        return ""
    return value.strip()


def is_accepted(value: str, candidate: FieldCandidate, accept: Predicate | None = None) -> bool:
    """Check a value against the candidate's threshold and an optional predicate.

    Args:
        value: Trimmed candidate value
        candidate: Candidate the value came from
        accept: Extra acceptance predicate

    Returns:
        True if the value is non-empty, longer than ``min_length`` (when set)
        and passes ``accept``
    """
    if not value:
        return False
    if candidate.min_length and len(value) <= candidate.min_length:
        return False
    return accept is None or accept(value)


def extract_field(
    document: Document,
    candidates: Sequence[FieldCandidate],
    accept: Predicate | None = None,
) -> str:
    """Return the first accepted value from a prioritised candidate list.

    Args:
        document: Document snapshot to read from
        candidates: Candidates in priority order
        accept: Optional extra acceptance predicate applied to each value

    Returns:
        The first accepted value, or an empty string if every candidate misses
    """
    for candidate in candidates:
        value = read_candidate(document, candidate)
        if is_accepted(value, candidate, accept):
            return value
        if value:
            LOGGER.debug(f"Rejected {candidate.locator!r} ({len(value)} chars)")
    return ""


def extract_field_or_last(
    document: Document,
    candidates: Sequence[FieldCandidate],
    accept: Predicate | None = None,
) -> str:
    """Like ``extract_field`` but falls back to the last non-empty value.

    Used for commerce and article body fields: a candidate that clears the
    length threshold wins, otherwise each later non-empty candidate replaces
    the one before it.
    """
    last = ""
    for candidate in candidates:
        value = read_candidate(document, candidate)
        if is_accepted(value, candidate, accept):
            return value
        if value and (accept is None or accept(value)):
            last = value
    return last
