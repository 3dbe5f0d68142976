"""Slack API adapter and the capability interface handlers depend on."""
from .base import Channel, HistoryPage, Message, SlackClientInterface, User
from .slack import SlackAPIError, SlackPlatform

__all__ = [
    "Channel",
    "HistoryPage",
    "Message",
    "SlackAPIError",
    "SlackClientInterface",
    "SlackPlatform",
    "User",
]
