"""Abstract remote client for the authoritative journal backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from coffee_log.core.entry import Entry


class RemoteClient(ABC):
    """
    Interface over the remote journal API.

    Every method may raise ``NetworkError`` when the backend is unreachable
    and ``RemoteValidationError`` when a payload is rejected. Other failures
    (authorization included) surface as plain ``RemoteError``.
    """

    async def close(self) -> None:  # noqa: B027
        """Release network resources. No-op by default."""

    @abstractmethod
    async def list(self) -> list[Entry]:
        """Canonical entries, newest ``brewed_at`` first, all ``synced``."""
        ...

    @abstractmethod
    async def create(self, payload: dict[str, Any]) -> Entry:
        """
        Create an entry.

        The server keeps a valid client-supplied ``id`` and assigns
        ``created_at``/``updated_at``.

        Returns:
            The canonical entry, marked ``synced``
        """
        ...

    @abstractmethod
    async def update(self, entry_id: str, payload: dict[str, Any]) -> Entry:
        """
        Update an entry, preserving its ``created_at``.

        Raises:
            NotFoundError: If the server has no entry with this id
        """
        ...

    @abstractmethod
    async def delete(self, entry_id: str) -> None:
        """Delete an entry. Succeeds when the id is already absent."""
        ...
