"""Shared test doubles."""
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from slack_mcp.tools.slack_tool.platforms import (
    Channel,
    HistoryPage,
    SlackClientInterface,
    User,
)


class FakeSlackClient(SlackClientInterface):
    """In-memory SlackClientInterface that records every call."""

    def __init__(
        self,
        channels: Optional[List[Channel]] = None,
        next_cursor: str = "",
        history: Optional[HistoryPage] = None,
        error: Optional[Exception] = None,
    ):
        self.channels = channels or []
        self.next_cursor = next_cursor
        self.history = history or HistoryPage(messages=[])
        self.error = error
        self.calls: List[Tuple[str, dict]] = []

    def list_channels_page(
        self,
        types: Sequence[str],
        limit: int,
        cursor: str = "",
    ) -> Tuple[List[Channel], str]:
        self.calls.append(("list_channels_page", {"types": list(types), "limit": limit, "cursor": cursor}))
        if self.error:
            raise self.error
        return list(self.channels), self.next_cursor

    def fetch_history_page(
        self,
        channel: str,
        limit: int,
        cursor: str = "",
        oldest: str = "",
        latest: str = "",
    ) -> HistoryPage:
        self.calls.append((
            "fetch_history_page",
            {"channel": channel, "limit": limit, "cursor": cursor, "oldest": oldest, "latest": latest},
        ))
        if self.error:
            raise self.error
        return self.history

    def list_users_page(self, limit: int, cursor: str = "") -> Tuple[List[User], str]:
        self.calls.append(("list_users_page", {"limit": limit, "cursor": cursor}))
        return [], ""


class FakeProvider:
    """Stands in for ApiProvider in handler tests."""

    def __init__(self, client: SlackClientInterface, users: Optional[Dict[str, User]] = None):
        self.client = client
        self.users = users or {}
        self.provide_calls = 0

    def provide(self) -> SlackClientInterface:
        self.provide_calls += 1
        return self.client

    def provide_users_map(self) -> Dict[str, User]:
        return self.users


@pytest.fixture
def fake_client():
    return FakeSlackClient()


@pytest.fixture
def fake_provider(fake_client):
    return FakeProvider(fake_client)
