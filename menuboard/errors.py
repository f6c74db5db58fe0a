"""Exception types raised by the menu dashboard core."""

from __future__ import annotations


class MenuboardError(Exception):
    """Base class for all menuboard errors."""


class AuthenticationError(MenuboardError):
    """The bearer credential is missing or was rejected by the backend."""


class ValidationError(MenuboardError, ValueError):
    """A client-side precondition failed before any network call."""


class FetchError(MenuboardError):
    """A read against the backend failed (network or server error)."""


class MutationError(MenuboardError):
    """A create, update or delete against the backend failed."""


class MutationInProgressError(MenuboardError):
    """The same action was submitted again while still in flight."""

    def __init__(self, action: str) -> None:
        super().__init__(f"'{action}' is already in progress")
        self.action = action
