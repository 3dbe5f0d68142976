"""
Slack Tool - Read Slack channels and history over the web API.

Supports:
- conversations_history: paginated channel messages
- channels_list: paginated, sortable channel listing
"""
from .slack_tool import register_tools

__all__ = ["register_tools"]
