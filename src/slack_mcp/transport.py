"""
httpx transport that makes requests look like they come from the Slack web client.
"""
from __future__ import annotations

import httpx

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)


class CookieTransport(httpx.BaseTransport):
    """
    Wraps another transport and stamps every request with a browser
    User-Agent and the session cookies.

    Example:
        transport = CookieTransport(httpx.HTTPTransport(), BROWSER_USER_AGENT, "xoxd-...", "1744415074")
        client = httpx.Client(transport=transport)
    """

    def __init__(
        self,
        transport: httpx.BaseTransport,
        user_agent: str,
        cookie: str,
        ds_cookie: str,
    ):
        self._transport = transport
        self._user_agent = user_agent
        self._cookie = cookie
        self._ds_cookie = ds_cookie

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        headers = request.headers.copy()
        headers["User-Agent"] = self._user_agent
        headers["Cookie"] = f"d={self._cookie};d-s={self._ds_cookie}"

        # The caller's request is left untouched
        cloned = httpx.Request(
            method=request.method,
            url=request.url,
            headers=headers,
            stream=request.stream,
            extensions=request.extensions,
        )
        return self._transport.handle_request(cloned)

    def close(self) -> None:
        self._transport.close()
