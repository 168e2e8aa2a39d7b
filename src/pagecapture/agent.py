"""In-page agent message handling.

The host runtime sends small action messages to the agent running alongside a
page. Two actions are answered; anything else gets no response.

Usage:
    agent = CaptureAgent(page)
    reply = await agent.handle({"action": "extractContent"})
"""

import logging
from collections.abc import Mapping
from typing import Any

from pagecapture.document import PageSource
from pagecapture.exceptions import ValidationError
from pagecapture.services.extract import ExtractService

LOGGER = logging.getLogger(__name__)

EXTRACT_CONTENT = "extractContent"
GET_SELECTED_TEXT = "getSelectedText"


class CaptureAgent:
    """Answers host-runtime requests for one page."""

    def __init__(self, page: PageSource, service: ExtractService | None = None):
        """Initialize agent.

        Args:
            page: Page the agent is attached to
            service: Optional extract service (defaults to one built from the environment)
        """
        self._page = page
        self._service = service or ExtractService()
        self.last_selection = ""

    def capture_selection(self) -> str:
        """Read and remember the page's current selection."""
        self.last_selection = (self._page.selection() or "").strip()
        return self.last_selection

    async def handle(self, message: Mapping[str, Any]) -> dict[str, Any] | None:
        """
        Answer a single host-runtime message.

        Args:
            message: Message with an ``action`` key

        Returns:
            Response payload, or None for actions the agent does not handle

        Raises:
            ValidationError: If the message is not a mapping
        """
        if not isinstance(message, Mapping):
            raise ValidationError("Agent message must be a mapping", field="message", value=type(message).__name__)

        action = message.get("action")
        if action == GET_SELECTED_TEXT:
            return {"selectedText": self.capture_selection()}
        if action == EXTRACT_CONTENT:
            # The live selection is usually gone by now; prefer the captured one
            selection = self.last_selection or None
            response = await self._service.extract(self._page, selection=selection)
            return response.to_message()

        LOGGER.debug(f"Ignoring unknown action {action!r}")
        return None
