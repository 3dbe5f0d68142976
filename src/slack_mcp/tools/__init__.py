"""MCP tools exposed by the server."""
