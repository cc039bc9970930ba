"""Exceptions raised by the Telldus client."""

from __future__ import annotations


class TelldusError(Exception):
    """Base class for Telldus client errors."""


class TelldusTransportError(TelldusError):
    """A request failed: network error, non-200 status or malformed body."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        """Store the HTTP status alongside the message when known."""

        super().__init__(message)
        self.status = status


class TokenRefreshError(TelldusTransportError):
    """The local API refused to refresh the bearer token."""


class CacheFileError(TelldusError):
    """A snapshot file is missing, unreadable or malformed."""


class InvalidCommandError(TelldusError, ValueError):
    """The command name is not a known device command."""
