"""Pure text and regex utilities.

Task-list detection, identifier extraction from URLs, and recovery of values
from script-embedded JSON state (decoder first, regex as the fallback).
"""

import json
import logging
import re
from typing import Any

from pagecapture.exceptions import EmbeddedStateError
from pagecapture.models import VideoIdentity

LOGGER = logging.getLogger(__name__)

# =============================================================================
# Task Markers
# =============================================================================

# Any one of these marks a text selection as a task list
TASK_LIST_PATTERNS = [
    re.compile(r"^[-*•]\s", re.MULTILINE),  # Bullet points
    re.compile(r"^\d+\.\s", re.MULTILINE),  # Numbered list
    re.compile(r"^\[[\sx]\]", re.MULTILINE | re.IGNORECASE),  # Checkboxes [ ] or [x]
    re.compile(r"todo|to-do|task|item", re.IGNORECASE),  # Task keywords
]

# Line grammar: bullet, number, or bare checkbox, each with an optional checkbox
TASK_LINE_REGEX = re.compile(
    r"^[-*•]\s*(?:\[[\sx]\]\s*)?(.+)$|^\d+\.\s*(?:\[[\sx]\]\s*)?(.+)$|^\[[\sx]\]\s*(.+)$",
    re.IGNORECASE,
)

COMPLETED_MARKERS = ("[x]", "✓", "done")


def is_task_list(text: str | None) -> bool:
    """Check whether text looks like a task list.

    Args:
        text: Candidate text (usually a user selection)

    Returns:
        True if any task pattern matches
    """
    if not text:
        return False
    return any(pattern.search(text) for pattern in TASK_LIST_PATTERNS)


def match_task_line(line: str) -> str | None:
    """Return the task text of a line matching the task grammar, else None."""
    match = TASK_LINE_REGEX.match(line)
    if not match:
        return None
    return next(group for group in match.groups() if group is not None)


def is_completed_line(line: str) -> bool:
    """Check a line for a checked box, a checkmark or the word "done"."""
    lower = line.lower()
    return any(marker in lower for marker in COMPLETED_MARKERS)


# =============================================================================
# URL Identifiers
# =============================================================================

VIDEO_ID_PATTERNS = [
    re.compile(r"[?&]v=([a-zA-Z0-9_-]+)"),
    re.compile(r"youtu\.be/([a-zA-Z0-9_-]+)"),
    re.compile(r"embed/([a-zA-Z0-9_-]+)"),
    re.compile(r"/shorts/([a-zA-Z0-9_-]+)"),
]

CATALOG_ID_PATTERNS = [
    re.compile(r"/dp/([A-Z0-9]{10})"),
    re.compile(r"/gp/product/([A-Z0-9]{10})"),
]


def video_id_from_url(url: str) -> str | None:
    """Extract a YouTube video ID from a watch, short-link, embed or shorts URL."""
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def video_identity(url: str) -> VideoIdentity | None:
    """URL-derived identity of the video a page points to, if any."""
    video_id = video_id_from_url(url)
    return VideoIdentity(id=video_id) if video_id else None


def catalog_id_from_url(url: str) -> str | None:
    """Extract a marketplace catalog ID (ASIN) from a product URL."""
    for pattern in CATALOG_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


# =============================================================================
# Embedded JSON State
# =============================================================================

_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    '"': '"',
    "\\": "\\",
    "/": "/",
}
_ESCAPE_REGEX = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def decode_json_string(raw: str) -> str:
    """Decode the escape sequences of a JSON string body.

    Handles ``\\n``, ``\\r``, ``\\t``, ``\\"``, ``\\\\``, ``\\/`` and ``\\uXXXX`` in a
    single pass, so an escaped backslash is never re-read as the start of
    another escape. Unknown escapes are kept verbatim.

    Args:
        raw: String body as it appears between the quotes in the source

    Returns:
        Decoded text
    """

    def replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape.startswith("u") and len(escape) == 5:
            return chr(int(escape[1:], 16))
        return _ESCAPES.get(escape, match.group(0))

    return _ESCAPE_REGEX.sub(replace, raw)


def find_state_payload(script: str, variable: str) -> Any | None:
    """Decode a JSON object assigned to a state variable inside a script.

    Matches ``ytInitialData = {...}``, ``var ytInitialData = {...}`` and
    ``window["ytInitialData"] = {...}`` and decodes from the opening brace, so
    the payload may be followed by more script code.

    Args:
        script: Raw inline script text
        variable: State variable name

    Returns:
        Decoded object, or None when the script has no such assignment.

    Raises:
        EmbeddedStateError: If an assignment exists but its payload is not valid JSON.
    """
    assignment = re.search(
        rf"""(?:\b{re.escape(variable)}|\[["']{re.escape(variable)}["']\])\s*=\s*(?=\{{)""",
        script,
    )
    if not assignment:
        return None
    try:
        payload, _ = json.JSONDecoder().raw_decode(script, assignment.end())
    except json.JSONDecodeError as e:
        raise EmbeddedStateError(
            f"Malformed {variable} payload: {e.msg}",
            variable=variable,
            context={"position": e.pos},
        ) from e
    return payload


def recover_string_field(script: str, field: str, after: str | None = None) -> str | None:
    """Pull a single string field out of (possibly malformed) JSON text.

    Args:
        script: Raw script text
        field: JSON key to look for
        after: Optional enclosing key; only text after its first occurrence is searched

    Returns:
        Decoded value of the first occurrence, or None.
    """
    if after is not None:
        anchor = re.search(rf'"{re.escape(after)}"\s*:', script)
        if not anchor:
            return None
        script = script[anchor.end():]
    match = re.search(rf'"{re.escape(field)}"\s*:\s*"((?:[^"\\]|\\.)*)"', script, re.DOTALL)
    if not match:
        return None
    return decode_json_string(match.group(1))


def dig(data: Any, *path: str | int) -> Any:
    """Follow a key/index path through nested JSON, returning None on any miss."""
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current
