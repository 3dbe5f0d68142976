"""
Authenticated access to the Slack API.

ApiProvider is constructed once at startup and handed to every tool handler.
The first call to provide() authenticates the session and loads the user
directory; later calls return the cached client.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import httpx

from .config import ProviderSettings
from .tools.slack_tool.platforms import (
    SlackAPIError,
    SlackClientInterface,
    SlackPlatform,
    User,
)
from .transport import BROWSER_USER_AGENT, CookieTransport

logger = logging.getLogger(__name__)

USERS_PAGE_LIMIT = 1000


class ProviderError(Exception):
    """Base class for ApiProvider failures."""


class HandshakeError(ProviderError):
    """
    auth.test failed.

    The session is unusable; callers should treat this as a startup failure
    and not retry.
    """


class BootstrapError(ProviderError):
    """The user directory could not be loaded from cache or from Slack."""


class BootstrapOutcome(Enum):
    CACHE_HIT = "cache_hit"
    FETCH_SUCCESS = "fetch_success"
    FETCH_FAILURE = "fetch_failure"


def build_slack_client(settings: ProviderSettings) -> SlackPlatform:
    """Create an unauthenticated adapter over the cookie-stamping transport."""
    transport = CookieTransport(
        httpx.HTTPTransport(proxy=settings.proxy, verify=settings.ssl_verify()),
        BROWSER_USER_AGENT,
        settings.cookie,
        settings.ds_cookie,
    )
    return SlackPlatform(token=settings.token, transport=transport)


class ApiProvider:
    """
    Lazily authenticated Slack client plus the workspace user directory.

    Example:
        provider = ApiProvider(ProviderSettings.from_env())
        client = provider.provide()
        users = provider.provide_users_map()
    """

    def __init__(
        self,
        settings: ProviderSettings,
        client_factory: Optional[Callable[[ProviderSettings], SlackPlatform]] = None,
    ):
        self._settings = settings
        self._client_factory = client_factory or build_slack_client
        self._client: Optional[SlackPlatform] = None
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ApiProvider":
        return cls(ProviderSettings.from_env(environ))

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    def provide(self) -> SlackClientInterface:
        """
        Return the authenticated client, creating it on first use.

        Concurrent first callers block until the single initialization
        finishes and then share its client.

        Raises:
            HandshakeError: if Slack rejects the session (fatal)
            BootstrapError: if the user directory could not be loaded; the
                client is still cached and later calls return it
        """
        client = self._client
        if client is not None:
            return client

        with self._lock:
            if self._client is not None:
                return self._client

            client = self._boot()
            try:
                self._bootstrap_dependencies(client)
            finally:
                self._client = client

        return client

    def provide_users_map(self) -> Dict[str, User]:
        """Current user directory keyed by user ID. Never hits the network."""
        return self._users

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def _boot(self) -> SlackPlatform:
        api = self._client_factory(self._settings)
        try:
            identity = api.auth_test()
        except (SlackAPIError, httpx.HTTPError, ValueError) as e:
            api.close()
            raise HandshakeError(f"Slack authentication failed: {e}") from e

        url = identity.get("url")
        if not url:
            api.close()
            raise HandshakeError("Slack authentication failed: auth.test returned no workspace URL")

        logger.info(
            "Authenticated as: %s (%s) in team %s",
            identity.get("user"),
            identity.get("user_id"),
            identity.get("team"),
        )
        return api.with_base_url(url.rstrip("/") + "/api/")

    def _bootstrap_dependencies(self, client: SlackClientInterface) -> BootstrapOutcome:
        outcome, users, error = self._load_users(client)

        if outcome is BootstrapOutcome.FETCH_FAILURE:
            raise BootstrapError(f"Failed to fetch users: {error}") from error

        if outcome is BootstrapOutcome.FETCH_SUCCESS:
            self._write_cache(users)

        self._users = {user.id: user for user in users}
        return outcome

    def _load_users(
        self,
        client: SlackClientInterface,
    ) -> Tuple[BootstrapOutcome, List[User], Optional[Exception]]:
        cached = self._read_cache()
        if cached is not None:
            return BootstrapOutcome.CACHE_HIT, cached, None

        logger.info("Fetching users from API...")
        try:
            users = client.list_users(page_size=USERS_PAGE_LIMIT)
        except (SlackAPIError, httpx.HTTPError, ValueError) as e:
            logger.error("Failed to fetch users: %s", e)
            return BootstrapOutcome.FETCH_FAILURE, [], e

        logger.info("Fetched %d users from API", len(users))
        return BootstrapOutcome.FETCH_SUCCESS, users, None

    def _read_cache(self) -> Optional[List[User]]:
        path = self._settings.users_cache
        if not path:
            return None

        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Failed to read cache file %s: %s; will refetch", path, e)
            return None

        try:
            if not isinstance(raw, list):
                raise ValueError("expected a JSON array of users")
            users = [User.from_dict(item) for item in raw]
        except ValueError as e:
            logger.warning("Failed to parse cache file %s: %s; will refetch", path, e)
            return None

        logger.info("Loaded %d users from cache %r", len(users), path)
        return users

    def _write_cache(self, users: List[User]) -> None:
        path = self._settings.users_cache
        if not path:
            return

        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([user.to_dict() for user in users], f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write cache file %r: %s", path, e)
            with contextlib.suppress(OSError):
                os.remove(tmp_path)
            return

        logger.info("Wrote %d users to cache %r", len(users), path)
