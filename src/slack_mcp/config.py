"""
Process-wide settings for the Slack API provider.

Everything is read once from the environment at startup. Problems found here
are fatal: the server cannot serve any tool without a valid configuration.
"""
from __future__ import annotations

import logging
import os
import ssl
from dataclasses import dataclass
from typing import Mapping, Optional, Union

import httpx

from .credentials import CredentialManager, SLACK_CREDENTIALS

logger = logging.getLogger(__name__)

DEFAULT_USERS_CACHE = ".users_cache.json"


class ConfigError(Exception):
    """Raised when the environment holds an invalid or conflicting setting."""


@dataclass(frozen=True)
class ProviderSettings:
    """Immutable configuration for ApiProvider."""

    token: str
    cookie: str
    ds_cookie: str
    proxy: Optional[str] = None
    ca_file: Optional[str] = None
    insecure: bool = False
    users_cache: Optional[str] = None
    """Path of the user directory cache, or None when caching is disabled"""

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ProviderSettings":
        """
        Build settings from environment variables.

        Raises:
            CredentialError: if the xoxc token or the xoxd cookie is missing
            ConfigError: if the proxy URL is invalid, or both a custom CA and
                insecure TLS are requested
        """
        env = os.environ if environ is None else environ
        creds = CredentialManager(SLACK_CREDENTIALS, environ=env)

        token = creds.require("slack_xoxc")
        cookie = creds.require("slack_xoxd")
        ds_cookie = creds.get("slack_ds_cookie") or ""

        proxy = env.get("SLACK_MCP_PROXY") or None
        if proxy:
            _validate_proxy(proxy)

        ca_file = env.get("SLACK_MCP_SERVER_CA") or None
        insecure = bool(env.get("SLACK_MCP_SERVER_CA_INSECURE"))
        if insecure and ca_file:
            raise ConfigError(
                "SLACK_MCP_SERVER_CA and SLACK_MCP_SERVER_CA_INSECURE "
                "cannot be set at the same time"
            )

        users_cache = None
        if env.get("SLACK_MCP_ENABLE_USER_CACHE") == "true":
            users_cache = env.get("SLACK_MCP_USERS_CACHE") or DEFAULT_USERS_CACHE
            logger.info("User caching to disk is ENABLED. Cache path: %s", users_cache)
        else:
            logger.info("User caching to disk is DISABLED.")

        return cls(
            token=token,
            cookie=cookie,
            ds_cookie=ds_cookie,
            proxy=proxy,
            ca_file=ca_file,
            insecure=insecure,
            users_cache=users_cache,
        )

    def ssl_verify(self) -> Union[bool, ssl.SSLContext]:
        """
        Value for httpx's ``verify`` argument.

        A custom CA is added on top of the system trust store.
        """
        if self.insecure:
            return False
        if not self.ca_file:
            return True

        context = ssl.create_default_context()
        try:
            context.load_verify_locations(cafile=self.ca_file)
        except (OSError, ssl.SSLError) as e:
            raise ConfigError(f"Failed to load CA bundle {self.ca_file!r}: {e}") from e
        return context


def _validate_proxy(proxy: str) -> None:
    try:
        url = httpx.URL(proxy)
    except httpx.InvalidURL as e:
        raise ConfigError(f"Failed to parse proxy URL {proxy!r}: {e}") from e
    if not url.scheme or not url.host:
        raise ConfigError(f"Failed to parse proxy URL {proxy!r}: scheme and host are required")
