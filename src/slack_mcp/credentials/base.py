"""
Credential specifications and lookup.

A CredentialSpec describes one secret the server reads from the environment;
CredentialManager resolves specs against an environment mapping.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class CredentialSpec:
    """Describes a credential read from the process environment."""

    env_var: str
    """Environment variable holding the value"""

    tools: List[str] = field(default_factory=list)
    """Tools that cannot work without this credential"""

    required: bool = False
    """Whether the server refuses to start without it"""

    default: Optional[str] = None
    """Value used when the variable is unset or empty"""

    help_url: str = ""
    """Where to find instructions for obtaining the credential"""

    description: str = ""
    """Human-readable description"""


class CredentialError(Exception):
    """Raised when a required credential is missing."""

    def __init__(self, name: str, spec: CredentialSpec):
        message = f"{spec.env_var} environment variable is required"
        if spec.help_url:
            message = f"{message} (see {spec.help_url})"
        super().__init__(message)
        self.name = name
        self.spec = spec


class CredentialManager:
    """
    Resolves credentials from environment variables.

    Example:
        creds = CredentialManager(SLACK_CREDENTIALS)
        token = creds.require("slack_xoxc")
    """

    def __init__(
        self,
        specs: Mapping[str, CredentialSpec],
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._specs = dict(specs)
        self._environ = os.environ if environ is None else environ

    @classmethod
    def for_testing(
        cls,
        values: Dict[str, str],
        specs: Optional[Mapping[str, CredentialSpec]] = None,
    ) -> "CredentialManager":
        """Build a manager over a plain dict of env var values."""
        if specs is None:
            from .slack import SLACK_CREDENTIALS

            specs = SLACK_CREDENTIALS
        return cls(specs, environ=dict(values))

    def get(self, name: str) -> Optional[str]:
        """Return the credential value, its default, or None."""
        spec = self._specs[name]
        value = self._environ.get(spec.env_var, "")
        if value:
            return value
        return spec.default

    def require(self, name: str) -> str:
        """Return the credential value or raise CredentialError."""
        value = self.get(name)
        if not value:
            raise CredentialError(name, self._specs[name])
        return value

    def missing(self) -> List[str]:
        """Names of required credentials that are not set."""
        return [
            name
            for name, spec in self._specs.items()
            if spec.required and not self.get(name)
        ]

    def validate(self) -> None:
        """Raise CredentialError for the first missing required credential."""
        for name in self.missing():
            raise CredentialError(name, self._specs[name])
