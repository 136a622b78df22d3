"""Journal service: the UI-facing mutations that feed the outbox."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from coffee_log.core.entry import Entry, sort_entries
from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.errors import EntryValidationError

if TYPE_CHECKING:
    from coffee_log.storage.base import LocalStore
    from coffee_log.sync.sync_engine import SyncEngine

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({"beans", "brew_method", "notes", "rating", "brewed_at"})


class Journal:
    """
    Records journal edits locally and hands them to the sync engine.

    Each mutation writes the local entry and enqueues its outbox item in one
    store operation, then requests a sync pass. Edits never wait on the
    network and keep working while offline.

    Usage:
        journal = Journal(store, engine)
        entry = await journal.add_entry("Yirgacheffe", "pour_over", "2024-05-01T08:00:00Z")
        await journal.edit_entry(entry.id, rating=4)
        await journal.delete_entry(entry.id)
    """

    def __init__(
        self,
        store: LocalStore,
        engine: SyncEngine | None = None,
        *,
        auto_sync: bool = True,
    ) -> None:
        self._store = store
        self._engine = engine
        self._auto_sync = auto_sync

    async def list_entries(self) -> list[Entry]:
        """All local entries, newest brew first."""
        return sort_entries(await self._store.get_all_entries())

    async def get_entry(self, entry_id: str) -> Entry | None:
        return await self._store.get_entry(entry_id)

    async def pending_count(self) -> int:
        return sum(1 for entry in await self._store.get_all_entries() if entry.is_pending)

    async def add_entry(
        self,
        beans: str,
        brew_method: str,
        brewed_at: str,
        *,
        notes: str = "",
        rating: int = 0,
        entry_id: str | None = None,
    ) -> Entry:
        """Create a pending entry and queue its ``create``.

        Raises:
            EntryValidationError: If beans/brew method are blank or rating is out of range
        """
        entry = Entry.create(
            beans=beans,
            brew_method=brew_method,
            brewed_at=brewed_at,
            notes=notes,
            rating=rating,
            entry_id=entry_id,
        )
        if await self._store.get_entry(entry.id) is not None:
            raise EntryValidationError(f"Entry {entry.id} already exists")

        item = OutboxItem.create(
            OutboxAction.CREATE,
            entry.id,
            payload=entry.to_payload(),
            queued_at=entry.created_at,
        )
        await self._store.record_mutation(item, entry)
        logger.info("Added entry %s", entry.id)
        await self._after_mutation()
        return entry

    async def edit_entry(self, entry_id: str, **changes: Any) -> Entry:
        """Apply field changes to an entry and queue an ``update``.

        Raises:
            KeyError: If no local entry has this id
            EntryValidationError: If the result is invalid or a field is not editable
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise EntryValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")

        previous = await self._store.get_entry(entry_id)
        if previous is None:
            raise KeyError(entry_id)

        updated = previous.with_changes(**changes)
        item = OutboxItem.create(
            OutboxAction.UPDATE,
            entry_id,
            payload=updated.to_payload(),
            queued_at=updated.updated_at,
        )
        await self._store.record_mutation(item, updated)
        logger.info("Edited entry %s", entry_id)
        await self._after_mutation()
        return updated

    async def delete_entry(self, entry_id: str) -> None:
        """Remove an entry locally and queue a ``delete``.

        Deleting an id that is not stored locally still queues the delete;
        the remote treats a missing id as success.
        """
        item = OutboxItem.create(OutboxAction.DELETE, entry_id)
        await self._store.record_mutation(item)
        logger.info("Deleted entry %s", entry_id)
        await self._after_mutation()

    async def _after_mutation(self) -> None:
        if self._engine is None:
            return
        await self._engine.refresh()
        if self._auto_sync:
            self._engine.request_sync()
