"""Credential registry for the Slack MCP server."""
from .base import CredentialError, CredentialManager, CredentialSpec
from .slack import SLACK_CREDENTIALS

__all__ = [
    "CredentialError",
    "CredentialManager",
    "CredentialSpec",
    "SLACK_CREDENTIALS",
]
