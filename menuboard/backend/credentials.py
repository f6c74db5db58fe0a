"""Bearer credential lookup for authenticated backend calls."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import DashboardConfig

logger = logging.getLogger(__name__)


class CredentialProvider(ABC):
    """Abstract base class for bearer token lookup."""

    @abstractmethod
    def get_credential(self) -> str | None:
        """Return the current bearer token, or None when signed out.

        Implementations must be synchronous and side-effect free.
        """
        ...


class StaticCredentialProvider(CredentialProvider):
    """Returns a fixed token (tests, or a token passed on the command line)."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def get_credential(self) -> str | None:
        return self._token or None


class EnvCredentialProvider(CredentialProvider):
    """Reads the token from an environment variable."""

    def __init__(self, var: str = "MENUBOARD_TOKEN") -> None:
        self._var = var

    def get_credential(self) -> str | None:
        return os.environ.get(self._var, "").strip() or None


class TokenFileCredentialProvider(CredentialProvider):
    """Reads the token persisted by a previous login session."""

    def __init__(self, path: str | Path = "~/.config/menuboard/token") -> None:
        self._path = Path(path).expanduser()

    def get_credential(self) -> str | None:
        if not self._path.is_file():
            return None
        try:
            return self._path.read_text(encoding="utf-8").strip() or None
        except OSError:
            logger.warning("Could not read token file %s", self._path)
            return None


class ChainedCredentialProvider(CredentialProvider):
    """Asks each provider in turn; the first non-empty token wins."""

    def __init__(self, providers: list[CredentialProvider]) -> None:
        self._providers = list(providers)

    def get_credential(self) -> str | None:
        for provider in self._providers:
            token = provider.get_credential()
            if token:
                return token
        return None


def create_credential_provider(config: DashboardConfig) -> CredentialProvider:
    """Build the lookup chain: config token, environment, token file."""
    return ChainedCredentialProvider([
        StaticCredentialProvider(config.auth.token),
        EnvCredentialProvider(config.auth.token_env),
        TokenFileCredentialProvider(config.auth.token_path),
    ])
