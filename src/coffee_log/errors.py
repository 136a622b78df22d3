"""Exception hierarchy for the coffee log package."""

from __future__ import annotations


class CoffeeLogError(Exception):
    """Base class for all coffee log errors."""


class EntryValidationError(CoffeeLogError, ValueError):
    """A locally built entry failed validation (missing field, bad rating)."""


class StoreError(CoffeeLogError):
    """Local store is unavailable or returned an unreadable row."""


class RemoteError(CoffeeLogError):
    """Error from a remote client call."""

    kind = "remote"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkError(RemoteError):
    """Remote unreachable, timed out or failing server-side.

    The outbox item that triggered it stays queued and is retried on the
    next sync trigger.
    """

    kind = "network"


class RemoteValidationError(RemoteError):
    """Payload rejected by the remote side (400/422)."""

    kind = "validation"


class NotFoundError(RemoteError):
    """Remote has no record with the requested id."""

    kind = "not_found"
