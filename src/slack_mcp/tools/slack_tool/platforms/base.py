"""
Base classes for the Slack API adapter.

Handlers depend only on SlackClientInterface, the three remote calls they
actually need, so tests can supply a double without touching HTTP.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple


@dataclass
class Channel:
    """Represents a channel/conversation."""

    id: str
    """Unique channel identifier"""

    name: str
    """Human-readable channel name"""

    topic: str = ""
    """Channel topic text"""

    purpose: str = ""
    """Channel purpose text"""

    member_count: int = 0
    """Number of members"""


@dataclass
class Message:
    """Represents a message from a conversation history."""

    id: str
    """Message timestamp (ts), unique within the channel"""

    channel: str
    """Channel ID the message was posted in"""

    user_id: str
    """Author user ID, or bot ID for bot messages"""

    text: str
    """Message text content"""

    timestamp: str
    """ISO 8601 timestamp"""

    thread_id: Optional[str] = None
    """Parent thread timestamp if this message is part of a thread"""


@dataclass
class User:
    """A directory entry. ``data`` keeps the profile exactly as Slack sent it."""

    id: str
    name: str = ""
    real_name: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        if not isinstance(data, dict) or not data.get("id"):
            raise ValueError(f"user object without id: {data!r}")

        profile = data.get("profile") or {}
        if not isinstance(profile, dict):
            raise ValueError(f"user {data['id']!r} has a malformed profile: {profile!r}")

        real_name = data.get("real_name") or profile.get("real_name") or ""
        name = data.get("name") or ""
        if not isinstance(name, str) or not isinstance(real_name, str):
            raise ValueError(f"user {data['id']!r} has a malformed name")

        return cls(
            id=data["id"],
            name=name,
            real_name=real_name,
            data=data,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.data:
            return self.data
        return {"id": self.id, "name": self.name, "real_name": self.real_name}


@dataclass
class HistoryPage:
    """One page of conversations.history."""

    messages: List[Message]
    next_cursor: str = ""
    has_more: bool = False


class SlackClientInterface(ABC):
    """
    The remote operations the tool handlers need.

    Implemented by SlackPlatform for real traffic and by test doubles.
    """

    @abstractmethod
    def list_channels_page(
        self,
        types: Sequence[str],
        limit: int,
        cursor: str = "",
    ) -> Tuple[List[Channel], str]:
        """
        Fetch one page of channels.

        Args:
            types: Channel types to include (public_channel, private_channel, mpim, im)
            limit: Maximum number of channels in the page
            cursor: Continuation cursor from a previous page

        Returns:
            (channels, next_cursor); next_cursor is "" on the last page
        """
        pass

    @abstractmethod
    def fetch_history_page(
        self,
        channel: str,
        limit: int,
        cursor: str = "",
        oldest: str = "",
        latest: str = "",
    ) -> HistoryPage:
        """
        Fetch one page of messages from a channel, newest first.

        Args:
            channel: Channel ID
            limit: Maximum number of messages
            cursor: Continuation cursor from a previous page
            oldest: Only messages after this Unix timestamp
            latest: Only messages before this Unix timestamp
        """
        pass

    @abstractmethod
    def list_users_page(
        self,
        limit: int,
        cursor: str = "",
    ) -> Tuple[List[User], str]:
        """Fetch one page of workspace users; returns (users, next_cursor)."""
        pass

    def list_users(self, page_size: int = 1000) -> List[User]:
        """Fetch every user, following cursors until the last page."""
        users: List[User] = []
        cursor = ""
        while True:
            page, cursor = self.list_users_page(limit=page_size, cursor=cursor)
            users.extend(page)
            if not cursor:
                return users
