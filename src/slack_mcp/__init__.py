"""Slack MCP server: read-only Slack tools over stdio or SSE."""

__version__ = "1.0.0"
