"""
Slack platform adapter using the Slack Web API.

Authenticates like the Slack web client does: the xoxc session token travels
in the form body and the session cookies are added by the transport
(see slack_mcp.transport.CookieTransport).

Endpoints used:
- auth.test - Validate the session and discover the workspace URL
- conversations.list - List channels
- conversations.history - Read channel messages
- users.list - Fetch the user directory
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

import httpx

from .base import (
    Channel,
    HistoryPage,
    Message,
    SlackClientInterface,
    User,
)


class SlackPlatform(SlackClientInterface):
    """
    Slack platform adapter using the Web API.

    Example:
        platform = SlackPlatform(token="xoxc-...", transport=transport)
        identity = platform.auth_test()
        team = platform.with_base_url(identity["url"] + "api/")
    """

    BASE_URL = "https://slack.com/api/"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize Slack platform adapter.

        Args:
            token: Slack session token (xoxc-...)
            transport: httpx transport, normally a CookieTransport
            base_url: API root; the workspace URL + "api/" after auth.test
            timeout: HTTP request timeout in seconds
            client: Existing HTTP client to take over instead of creating one
        """
        self._token = token
        self._transport = transport
        self._timeout = timeout
        self.base_url = base_url
        if client is not None:
            client.base_url = base_url
            self._client = client
        else:
            self._client = httpx.Client(
                base_url=base_url,
                transport=transport,
                timeout=timeout,
            )

    def with_base_url(self, base_url: str) -> "SlackPlatform":
        """
        Return an adapter bound to ``base_url``.

        The HTTP client is handed over to the new adapter; this one must not
        be used afterwards.
        """
        return SlackPlatform(
            token=self._token,
            transport=self._transport,
            base_url=base_url,
            timeout=self._timeout,
            client=self._client,
        )

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Parse Slack API response and handle errors."""
        response.raise_for_status()
        data = response.json()

        if not data.get("ok", False):
            error = data.get("error", "Unknown error")
            raise SlackAPIError(error, data)

        return data

    def _call(self, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"token": self._token}
        if params:
            payload.update({k: v for k, v in params.items() if v not in (None, "")})
        response = self._client.post(f"/{method}", data=payload)
        return self._handle_response(response)

    def auth_test(self) -> dict[str, Any]:
        """
        Validate the session.

        Returns:
            The auth.test payload; ``url`` is the workspace root
            (e.g. "https://acme.slack.com/")

        Raises:
            SlackAPIError: if Slack rejects the session
            httpx.HTTPError: on transport failure
        """
        return self._call("auth.test")

    def list_channels_page(
        self,
        types: Sequence[str],
        limit: int,
        cursor: str = "",
    ) -> Tuple[List[Channel], str]:
        data = self._call("conversations.list", {
            "types": ",".join(types),
            "limit": limit,
            "cursor": cursor,
            "exclude_archived": "true",
        })

        channels = []
        for ch in data.get("channels", []):
            channels.append(Channel(
                id=ch.get("id", ""),
                name=ch.get("name", ""),
                topic=(ch.get("topic") or {}).get("value", ""),
                purpose=(ch.get("purpose") or {}).get("value", ""),
                member_count=ch.get("num_members") or 0,
            ))

        return channels, _next_cursor(data)

    def fetch_history_page(
        self,
        channel: str,
        limit: int,
        cursor: str = "",
        oldest: str = "",
        latest: str = "",
    ) -> HistoryPage:
        data = self._call("conversations.history", {
            "channel": channel,
            "limit": limit,
            "cursor": cursor,
            "oldest": oldest,
            "latest": latest,
            "inclusive": "false",
        })

        messages = []
        for msg in data.get("messages", []):
            # Skip non-message types (join, leave, etc.)
            if msg.get("subtype") and msg.get("subtype") != "bot_message":
                continue

            messages.append(Message(
                id=msg.get("ts", ""),
                channel=channel,
                user_id=msg.get("user", msg.get("bot_id", "")),
                text=msg.get("text", ""),
                timestamp=self._ts_to_iso(msg.get("ts", "")),
                thread_id=msg.get("thread_ts"),
            ))

        return HistoryPage(
            messages=messages,
            next_cursor=_next_cursor(data),
            has_more=bool(data.get("has_more", False)),
        )

    def list_users_page(
        self,
        limit: int,
        cursor: str = "",
    ) -> Tuple[List[User], str]:
        data = self._call("users.list", {
            "limit": limit,
            "cursor": cursor,
        })
        users = [User.from_dict(member) for member in data.get("members", [])]
        return users, _next_cursor(data)

    def _ts_to_iso(self, ts: str) -> str:
        """Convert Slack timestamp to ISO 8601 format."""
        try:
            # Slack ts is Unix timestamp with microseconds: "1234567890.123456"
            unix_ts = float(ts)
            dt = datetime.fromtimestamp(unix_ts)
            return dt.isoformat()
        except (ValueError, TypeError):
            return ts

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "SlackPlatform":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def _next_cursor(data: dict[str, Any]) -> str:
    return (data.get("response_metadata") or {}).get("next_cursor", "") or ""


class SlackAPIError(Exception):
    """Exception raised when Slack API returns an error."""

    def __init__(self, message: str, response_data: dict[str, Any] | None = None):
        super().__init__(message)
        self.response_data = response_data or {}
