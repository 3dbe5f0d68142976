"""
API key authentication for the SSE transport.

When SLACK_MCP_SSE_API_KEY is set, every request to the SSE app must carry
``Authorization: Bearer <key>``. When it is unset, all connections are
accepted.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class UnauthorizedReason(Enum):
    MISSING = "unauthorized_sse_token_missing"
    INVALID = "unauthorized_sse_token_invalid"


@dataclass(frozen=True)
class Authorized:
    credential: str
    """Token supplied by the client, empty if none and no key is configured"""


@dataclass(frozen=True)
class Unauthorized:
    reason: UnauthorizedReason


AuthResult = Union[Authorized, Unauthorized]


def authorize(authorization: Optional[str], api_key: Optional[str]) -> AuthResult:
    """
    Decide whether a connection may proceed.

    Args:
        authorization: Raw Authorization header value, or None
        api_key: Configured shared secret; None or "" disables the check
    """
    credential = authorization or ""
    if credential.startswith(BEARER_PREFIX):
        credential = credential[len(BEARER_PREFIX):]

    if api_key:
        if not credential:
            return Unauthorized(UnauthorizedReason.MISSING)
        if not secrets.compare_digest(credential.encode(), api_key.encode()):
            return Unauthorized(UnauthorizedReason.INVALID)

    return Authorized(credential)


class SSEAuthMiddleware(BaseHTTPMiddleware):
    """
    Rejects unauthorized SSE requests with 401 before any stream is opened.

    The result for authorized requests is available as ``request.state.auth``.
    """

    def __init__(self, app, api_key: Optional[str] = None):
        super().__init__(app)
        self.api_key = api_key

    async def dispatch(self, request: Request, call_next):
        result = authorize(request.headers.get("Authorization"), self.api_key)

        if isinstance(result, Unauthorized):
            logger.info(
                "sse connection rejected: %s path=%s",
                result.reason.value,
                request.url.path,
            )
            return JSONResponse(
                {"error": "Unauthorized", "reason": result.reason.value},
                status_code=401,
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.auth = result
        return await call_next(request)
