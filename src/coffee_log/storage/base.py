"""Abstract base class for local journal storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from coffee_log.core.entry import Entry
    from coffee_log.core.outbox import OutboxItem

    EntryMerge = Callable[[list[Entry], list[Entry]], list[Entry]]


class LocalStore(ABC):
    """
    Abstract interface for the device-local persisted store.

    Holds two keyed collections: ``entries`` (keyed by entry id) and
    ``outbox`` (keyed by outbox item id). The sync engine depends only on
    this contract.

    Two operations must be inseparable, so that a concurrent reader never
    observes a torn intermediate state:

    - ``record_mutation``: the entry write and its outbox enqueue
    - ``replace_entries``: the full replacement of the entries collection
    """

    async def initialize(self) -> None:  # noqa: B027
        """Open connections / create schema. No-op by default."""

    async def close(self) -> None:  # noqa: B027
        """Release resources. No-op by default."""

    # ========== Entry Operations ==========

    @abstractmethod
    async def get_all_entries(self) -> list[Entry]:
        """Return every stored entry, in no particular order."""
        ...

    @abstractmethod
    async def get_entry(self, entry_id: str) -> Entry | None:
        """
        Get an entry by ID.

        Args:
            entry_id: The entry ID

        Returns:
            The entry if found, None otherwise
        """
        ...

    @abstractmethod
    async def put_entry(self, entry: Entry) -> None:
        """Insert or replace an entry by id."""
        ...

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry. Returns True if it existed."""
        ...

    @abstractmethod
    async def clear_entries(self) -> None:
        ...

    @abstractmethod
    async def replace_entries(self, entries: list[Entry]) -> None:
        """
        Atomically replace the whole entries collection.

        Readers see either the previous collection or ``entries``, never
        a partial mix.
        """
        ...

    # ========== Outbox Operations ==========

    @abstractmethod
    async def get_outbox_items(self) -> list[OutboxItem]:
        """Return all outbox items in insertion order."""
        ...

    @abstractmethod
    async def put_outbox_item(self, item: OutboxItem) -> None:
        """Insert an item, or overwrite it in place if the id exists."""
        ...

    @abstractmethod
    async def delete_outbox_item(self, item_id: str) -> bool:
        """Delete an outbox item. Returns True if it existed."""
        ...

    @abstractmethod
    async def clear_outbox(self) -> None:
        ...

    # ========== Combined Operations ==========

    @abstractmethod
    async def record_mutation(
        self, item: OutboxItem, entry: Entry | None = None
    ) -> OutboxItem:
        """
        Apply a local mutation and enqueue its outbox item as one step.

        For ``create``/``update`` items ``entry`` is written; for ``delete``
        items the entry ``item.entry_id`` is removed. The stored item's
        ``queued_at`` is moved past the latest one already queued if needed
        (see ``OutboxItem.queued_after``).

        Returns:
            The item as stored

        Raises:
            ValueError: If a create/update item is recorded without an entry
        """
        ...

    @abstractmethod
    async def complete_outbox_item(
        self, item: OutboxItem, confirmed: Entry | None = None
    ) -> bool:
        """
        Remove a confirmed outbox item and write back the server's answer.

        Runs as one step against the current outbox. Only when no other
        queued item references ``item.entry_id`` is the local copy touched:
        a ``delete`` removes the entry, a ``create``/``update`` stores
        ``confirmed`` as ``synced`` (dropping the old row if the server
        assigned a different id). Otherwise the local copy is newer than the
        server's answer and stays ``pending``.

        Returns:
            True if the local entry was written back
        """
        ...

    @abstractmethod
    async def reconcile_entries(
        self, remote: list[Entry], merge: EntryMerge
    ) -> list[Entry]:
        """
        Replace entries with ``merge(remote, pending)`` as one step.

        ``pending`` is read inside the same step, so a mutation recorded
        concurrently is either included or lands after the replacement.
        Remote entries whose delete is still queued are left out.

        Returns:
            The merged collection now stored
        """
        ...
