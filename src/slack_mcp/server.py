"""
Server composition: builds the FastMCP server and its transports.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP
from starlette.middleware import Middleware

from .credentials import CredentialManager, SLACK_CREDENTIALS
from .provider import ApiProvider
from .sse_auth import SSEAuthMiddleware
from .tools.slack_tool import register_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Slack MCP Server"


def create_server(provider: ApiProvider) -> FastMCP:
    """Create the MCP server with all Slack tools bound to ``provider``."""
    mcp = FastMCP(SERVER_NAME)
    register_tools(mcp, provider)
    return mcp


def create_sse_app(mcp: FastMCP, api_key: Optional[str] = None):
    """
    ASGI app serving ``mcp`` over SSE, guarded by SSEAuthMiddleware.

    Args:
        mcp: Server from create_server
        api_key: Shared secret; read from SLACK_MCP_SSE_API_KEY when None
    """
    if api_key is None:
        api_key = CredentialManager(SLACK_CREDENTIALS).get("sse_api_key")
    if not api_key:
        logger.warning("SLACK_MCP_SSE_API_KEY is not set; SSE connections are not authenticated")

    return mcp.http_app(
        transport="sse",
        middleware=[Middleware(SSEAuthMiddleware, api_key=api_key)],
    )


def serve_stdio(provider: Optional[ApiProvider] = None) -> None:
    """Serve over stdio. Startup errors (missing credentials, bad TLS config) propagate."""
    logging.basicConfig(level=logging.INFO)
    provider = provider or ApiProvider.from_env()
    create_server(provider).run(transport="stdio")


def serve_sse(
    host: str = "127.0.0.1",
    port: int = 13080,
    provider: Optional[ApiProvider] = None,
) -> None:
    """Serve over SSE with uvicorn."""
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    provider = provider or ApiProvider.from_env()
    app = create_sse_app(create_server(provider))
    logger.info("SSE server listening on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
