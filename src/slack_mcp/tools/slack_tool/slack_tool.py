"""
Slack Tool - Read channels and message history from a Slack workspace.

Provides read-only tools backed by Slack's web API:
- conversations_history: messages from a channel, paginated
- channels_list: channels of the requested types, paginated

Both tools return CSV. When more data is available, the Cursor column of
the last row holds the value to pass as ``cursor`` on the next call.

Requires SLACK_MCP_XOXC_TOKEN and SLACK_MCP_XOXD_TOKEN (see
slack_mcp.credentials).
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from fastmcp import FastMCP

from .channels import DEFAULT_LIMIT as CHANNELS_DEFAULT_LIMIT
from .channels import ChannelsHandler
from .conversations import DEFAULT_LIMIT as HISTORY_DEFAULT_LIMIT
from .conversations import ConversationsHandler

if TYPE_CHECKING:
    from slack_mcp.provider import ApiProvider


def register_tools(
    mcp: FastMCP,
    provider: "ApiProvider",
) -> None:
    """Register Slack tools with the MCP server."""

    conversations = ConversationsHandler(provider)
    channels = ChannelsHandler(provider)

    @mcp.tool()
    def conversations_history(
        channel_id: str,
        cursor: str = "",
        limit: str = HISTORY_DEFAULT_LIMIT,
    ) -> str:
        """
        Get messages from the channel by channel_id.

        The last row/column in the response is used as 'cursor' parameter
        for pagination if not empty.

        Args:
            channel_id: ID of the channel in format Cxxxxxxxxxx
            cursor: Cursor for pagination. Use the value of the last row and
                    column in the response as next_cursor field returned from
                    the previous request.
            limit: Limit of messages to fetch in format of maximum ranges of
                   time (e.g. 1d - 1 day, 30d - 30 days, 90d - 90 days which
                   is a default limit for free tier history) or number of
                   messages (e.g. 50). Must be empty when 'cursor' is provided.

        Returns:
            CSV with columns MsgID, UserID, UserName, RealName, Channel,
            ThreadTs, Text, Time, Cursor
        """
        return conversations.history(
            channel_id=channel_id,
            cursor=cursor,
            limit=limit,
        )

    @mcp.tool()
    def channels_list(
        channel_types: str,
        sort: str = "",
        limit: int = CHANNELS_DEFAULT_LIMIT,
        cursor: str = "",
    ) -> str:
        """
        Get list of channels.

        Args:
            channel_types: Comma-separated channel types. Allowed values:
                           'mpim', 'im', 'public_channel', 'private_channel'.
                           Example: 'public_channel,private_channel,im'
            sort: Type of sorting. Allowed values: 'popularity' - sort by
                  number of members/participants in each channel.
            limit: The maximum number of items to return. Must be an integer
                   under 1000 (default 100).
            cursor: Cursor for pagination. Use the value of the last row and
                    column in the response as next_cursor field returned from
                    the previous request.

        Returns:
            CSV with columns ID, Name, Topic, Purpose, MemberCount, Cursor
        """
        return channels.list_channels(
            channel_types=channel_types,
            sort=sort,
            limit=limit,
            cursor=cursor,
        )
