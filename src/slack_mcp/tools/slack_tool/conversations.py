"""
conversations_history: one page of channel messages rendered as CSV.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Optional

import httpx
from fastmcp.exceptions import ToolError

from .formatters import messages_to_csv
from .platforms import Message, SlackAPIError
from .text import process_text

if TYPE_CHECKING:
    from slack_mcp.provider import ApiProvider

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = "1d"
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000

_DAYS_RE = re.compile(r"^(\d+)d$")


@dataclass(frozen=True)
class HistoryWindow:
    """Resolved paging parameters for conversations.history."""

    limit: int
    oldest: str = ""
    latest: str = ""


def parse_limit(limit: str, cursor: str = "", now: Optional[datetime] = None) -> HistoryWindow:
    """
    Resolve the ``limit`` argument.

    "<N>d" selects messages since the start of the day N-1 days ago;
    a bare integer is a message count. An empty limit is only meaningful
    together with a cursor and fetches a default-size page.

    Raises:
        ToolError: if limit is neither form
    """
    limit = (limit or "").strip()

    if not limit:
        if cursor:
            return HistoryWindow(limit=DEFAULT_PAGE_SIZE)
        raise ToolError("limit must be set when no cursor is provided")

    match = _DAYS_RE.match(limit)
    if match:
        days = int(match.group(1))
        if days < 1:
            raise ToolError(f"Invalid limit {limit!r}: number of days must be positive")
        now = now or datetime.now()
        start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        oldest = start_of_today - timedelta(days=days - 1)
        return HistoryWindow(
            limit=DEFAULT_PAGE_SIZE,
            oldest=f"{oldest.timestamp():.6f}",
            latest=f"{now.timestamp():.6f}",
        )

    if limit.isdigit():
        count = int(limit)
        if count < 1:
            raise ToolError(f"Invalid limit {limit!r}: must be a positive number")
        return HistoryWindow(limit=min(count, MAX_PAGE_SIZE))

    raise ToolError(
        f"Invalid limit {limit!r}: use a day range like '1d' or '30d', "
        "or a number of messages like '50'"
    )


class ConversationsHandler:
    """
    Reads channel history and resolves authors through the user directory.

    Args:
        provider: Shared ApiProvider
        text_processor: Applied to message text before rendering
    """

    def __init__(
        self,
        provider: "ApiProvider",
        text_processor: Optional[Callable[[str], str]] = process_text,
    ):
        self.provider = provider
        self.text_processor = text_processor

    def history(
        self,
        channel_id: str,
        cursor: str = "",
        limit: str = DEFAULT_LIMIT,
    ) -> str:
        if not channel_id:
            raise ToolError("channel_id is required")

        # limit and cursor are documented as exclusive but both are forwarded
        window = parse_limit(limit, cursor)

        api = self.provider.provide()
        try:
            page = api.fetch_history_page(
                channel=channel_id,
                limit=window.limit,
                cursor=cursor,
                oldest=window.oldest,
                latest=window.latest,
            )
        except (SlackAPIError, httpx.HTTPError) as e:
            logger.error("conversations.history failed for %s: %s", channel_id, e)
            raise ToolError(f"Failed to fetch history for {channel_id}: {e}") from e

        messages = page.messages
        if self.text_processor is not None:
            messages = [self._normalize(msg) for msg in messages]

        next_cursor = page.next_cursor if page.has_more else ""
        return messages_to_csv(messages, self.provider.provide_users_map(), next_cursor)

    def _normalize(self, msg: Message) -> Message:
        return Message(
            id=msg.id,
            channel=msg.channel,
            user_id=msg.user_id,
            text=self.text_processor(msg.text),
            timestamp=msg.timestamp,
            thread_id=msg.thread_id,
        )
