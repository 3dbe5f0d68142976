"""
channels_list: one page of conversations.list rendered as CSV.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional

import httpx
from fastmcp.exceptions import ToolError

from .formatters import channels_to_csv
from .platforms import Channel, SlackAPIError

if TYPE_CHECKING:
    from slack_mcp.provider import ApiProvider

logger = logging.getLogger(__name__)

PUBLIC_CHANNEL = "public_channel"
PRIVATE_CHANNEL = "private_channel"
MPIM = "mpim"
IM = "im"

ALL_CHANNEL_TYPES = (PUBLIC_CHANNEL, PRIVATE_CHANNEL, MPIM, IM)

SORT_POPULARITY = "popularity"

DEFAULT_LIMIT = 100
MAX_LIMIT = 999


class ChannelsHandler:
    """
    Lists channels of the requested types.

    Args:
        provider: Shared ApiProvider
        text_processor: Optional function applied to topic and purpose
            before rendering; they are rendered verbatim when None
    """

    def __init__(
        self,
        provider: "ApiProvider",
        text_processor: Optional[Callable[[str], str]] = None,
    ):
        self.provider = provider
        self.text_processor = text_processor
        self.valid_types = frozenset(ALL_CHANNEL_TYPES)

    def parse_channel_types(self, channel_types: str) -> List[str]:
        """Split and validate a comma-separated channel type list."""
        types = [t.strip() for t in channel_types.split(",") if t.strip()]
        if not types:
            raise ToolError(
                "channel_types is required. Allowed values: " + ", ".join(ALL_CHANNEL_TYPES)
            )

        invalid = [t for t in types if t not in self.valid_types]
        if invalid:
            raise ToolError(
                f"Invalid channel type(s): {', '.join(invalid)}. "
                f"Allowed values: {', '.join(ALL_CHANNEL_TYPES)}"
            )

        # Preserve order, drop duplicates
        return list(dict.fromkeys(types))

    def list_channels(
        self,
        channel_types: str,
        sort: str = "",
        limit: int = DEFAULT_LIMIT,
        cursor: str = "",
    ) -> str:
        """
        Fetch one page of channels and render it as CSV.

        The next-page cursor, if any, is written in the Cursor column of
        the last row.
        """
        types = self.parse_channel_types(channel_types)
        limit = max(1, min(MAX_LIMIT, int(limit or DEFAULT_LIMIT)))

        api = self.provider.provide()
        try:
            channels, next_cursor = api.list_channels_page(
                types=types,
                limit=limit,
                cursor=cursor,
            )
        except (SlackAPIError, httpx.HTTPError) as e:
            logger.error("conversations.list failed: %s", e)
            raise ToolError(f"Failed to list channels: {e}") from e

        if sort == SORT_POPULARITY:
            channels = sorted(channels, key=lambda ch: ch.member_count, reverse=True)

        if self.text_processor is not None:
            channels = [self._normalize(ch) for ch in channels]

        if not channels:
            next_cursor = ""

        return channels_to_csv(channels, next_cursor)

    def _normalize(self, channel: Channel) -> Channel:
        return Channel(
            id=channel.id,
            name=channel.name,
            topic=self.text_processor(channel.topic),
            purpose=self.text_processor(channel.purpose),
            member_count=channel.member_count,
        )
