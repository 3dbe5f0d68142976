"""Tests for the channels_list handler."""
import httpx
import pytest
from fastmcp.exceptions import ToolError

from slack_mcp.tools.slack_tool.channels import (
    ALL_CHANNEL_TYPES,
    MAX_LIMIT,
    PUBLIC_CHANNEL,
    ChannelsHandler,
)
from slack_mcp.tools.slack_tool.platforms import Channel, SlackAPIError
from slack_mcp.tools.slack_tool.text import process_text


def two_channels():
    return [
        Channel(id="C1", name="channel1", topic="Topic1", purpose="Purpose1", member_count=5),
        Channel(id="C2", name="channel2", topic="Topic2", purpose="Purpose2", member_count=10),
    ]


def csv_lines(text):
    return text.strip().split("\n")


class TestChannelsHandler:
    """Tests for ChannelsHandler."""

    def test_valid_types(self, fake_provider):
        """All four channel types are allowed."""
        handler = ChannelsHandler(fake_provider)

        assert handler.provider is fake_provider
        assert len(handler.valid_types) == len(ALL_CHANNEL_TYPES)
        for chan_type in ALL_CHANNEL_TYPES:
            assert chan_type in handler.valid_types

    def test_sorted_by_popularity_with_cursor_on_last_row(self, fake_provider, fake_client):
        """Sorted descending by members; cursor only on the final row."""
        fake_client.channels = two_channels()
        fake_client.next_cursor = "nextcursor123"

        handler = ChannelsHandler(fake_provider)
        result = handler.list_channels(
            channel_types=PUBLIC_CHANNEL,
            sort="popularity",
            limit=10,
        )

        assert csv_lines(result) == [
            "ID,Name,Topic,Purpose,MemberCount,Cursor",
            "C2,#channel2,Topic2,Purpose2,10,",
            "C1,#channel1,Topic1,Purpose1,5,nextcursor123",
        ]

        assert fake_client.calls == [
            ("list_channels_page", {"types": [PUBLIC_CHANNEL], "limit": 10, "cursor": ""}),
        ]

    def test_unknown_sort_keeps_source_order(self, fake_provider, fake_client):
        """Sort values other than 'popularity' leave order untouched."""
        fake_client.channels = two_channels()

        handler = ChannelsHandler(fake_provider)
        result = handler.list_channels(channel_types=PUBLIC_CHANNEL, sort="alphabetical")

        lines = csv_lines(result)
        assert lines[1].startswith("C1,")
        assert lines[2].startswith("C2,")

    def test_popularity_sort_is_stable(self, fake_provider, fake_client):
        """Channels with equal member counts keep their relative order."""
        fake_client.channels = [
            Channel(id="C1", name="a", member_count=3),
            Channel(id="C2", name="b", member_count=7),
            Channel(id="C3", name="c", member_count=3),
            Channel(id="C4", name="d", member_count=7),
        ]

        handler = ChannelsHandler(fake_provider)
        result = handler.list_channels(channel_types=PUBLIC_CHANNEL, sort="popularity")

        ids = [line.split(",")[0] for line in csv_lines(result)[1:]]
        assert ids == ["C2", "C4", "C1", "C3"]

    def test_multiple_channel_types(self, fake_provider, fake_client):
        """Comma-separated types are split and trimmed."""
        handler = ChannelsHandler(fake_provider)
        handler.list_channels(channel_types="public_channel, private_channel,im")

        assert fake_client.calls[0][1]["types"] == ["public_channel", "private_channel", "im"]

    @pytest.mark.parametrize("channel_types", [
        "bogus",
        "public_channel,bogus",
        "channels",
        "",
        " , ",
    ])
    def test_invalid_channel_type_rejected_before_remote_call(
        self, fake_provider, fake_client, channel_types
    ):
        """Invalid filters raise before the provider or API is touched."""
        handler = ChannelsHandler(fake_provider)

        with pytest.raises(ToolError):
            handler.list_channels(channel_types=channel_types)

        assert fake_client.calls == []
        assert fake_provider.provide_calls == 0

    def test_error_names_invalid_type(self, fake_provider):
        """Error message lists the offending value."""
        handler = ChannelsHandler(fake_provider)

        with pytest.raises(ToolError, match="bogus"):
            handler.list_channels(channel_types="public_channel,bogus")

    def test_empty_result_is_header_only(self, fake_provider, fake_client):
        """No channels renders just the header, without a cursor."""
        fake_client.next_cursor = "ignored"

        handler = ChannelsHandler(fake_provider)
        result = handler.list_channels(channel_types=PUBLIC_CHANNEL)

        assert result == "ID,Name,Topic,Purpose,MemberCount,Cursor\n"

    def test_forwards_cursor(self, fake_provider, fake_client):
        """The cursor is passed through untouched."""
        handler = ChannelsHandler(fake_provider)
        handler.list_channels(channel_types=PUBLIC_CHANNEL, cursor="dGVhbTpDMDYx")

        assert fake_client.calls[0][1]["cursor"] == "dGVhbTpDMDYx"

    @pytest.mark.parametrize("limit,expected", [
        (10, 10),
        (5000, MAX_LIMIT),
        (-3, 1),
        (0, 100),
    ])
    def test_limit_bounds(self, fake_provider, fake_client, limit, expected):
        """Limit is clamped to 1..999 and defaults to 100."""
        handler = ChannelsHandler(fake_provider)
        handler.list_channels(channel_types=PUBLIC_CHANNEL, limit=limit)

        assert fake_client.calls[0][1]["limit"] == expected

    def test_api_error_becomes_tool_error(self, fake_provider, fake_client):
        """Slack errors surface as ToolError with no partial output."""
        fake_client.error = SlackAPIError("not_authed")

        handler = ChannelsHandler(fake_provider)

        with pytest.raises(ToolError, match="not_authed"):
            handler.list_channels(channel_types=PUBLIC_CHANNEL)

    def test_network_error_becomes_tool_error(self, fake_provider, fake_client):
        """Transport failures surface as ToolError."""
        fake_client.error = httpx.ConnectError("connection refused")

        handler = ChannelsHandler(fake_provider)

        with pytest.raises(ToolError, match="connection refused"):
            handler.list_channels(channel_types=PUBLIC_CHANNEL)

    def test_text_processor_applies_to_topic_and_purpose(self, fake_provider, fake_client):
        """An explicit text processor normalizes topic and purpose."""
        fake_client.channels = [
            Channel(id="C1", name="general", topic="The Daily Standup", purpose="All about the Releases", member_count=1),
        ]

        handler = ChannelsHandler(fake_provider, text_processor=process_text)
        result = handler.list_channels(channel_types=PUBLIC_CHANNEL)

        assert csv_lines(result)[1] == "C1,#general,daily standup,releases,1,"

    def test_fields_with_commas_are_quoted(self, fake_provider, fake_client):
        """Topic text containing commas stays in one column."""
        fake_client.channels = [
            Channel(id="C1", name="ops", topic="alerts, pages", purpose="", member_count=2),
        ]

        handler = ChannelsHandler(fake_provider)
        result = handler.list_channels(channel_types=PUBLIC_CHANNEL)

        assert csv_lines(result)[1] == 'C1,#ops,"alerts, pages",,2,'
