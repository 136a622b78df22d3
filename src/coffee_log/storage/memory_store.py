"""In-memory local store for tests and ephemeral sessions."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from coffee_log.core.entry import Entry, SyncStatus
from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.storage.base import LocalStore

if TYPE_CHECKING:
    from coffee_log.storage.base import EntryMerge


class InMemoryStore(LocalStore):
    """Dict-backed store.

    Data is lost when the process exits. Collection replacement swaps the
    whole dict, so a reader holding the old mapping never sees a mix.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Entry] = {}
        self._outbox: dict[str, OutboxItem] = {}
        self._lock = asyncio.Lock()

    # ========== Entry Operations ==========

    async def get_all_entries(self) -> list[Entry]:
        return list(self._entries.values())

    async def get_entry(self, entry_id: str) -> Entry | None:
        return self._entries.get(entry_id)

    async def put_entry(self, entry: Entry) -> None:
        async with self._lock:
            self._entries[entry.id] = entry

    async def delete_entry(self, entry_id: str) -> bool:
        async with self._lock:
            return self._entries.pop(entry_id, None) is not None

    async def clear_entries(self) -> None:
        async with self._lock:
            self._entries = {}

    async def replace_entries(self, entries: list[Entry]) -> None:
        replacement = {entry.id: entry for entry in entries}
        async with self._lock:
            self._entries = replacement

    # ========== Outbox Operations ==========

    async def get_outbox_items(self) -> list[OutboxItem]:
        return list(self._outbox.values())

    async def put_outbox_item(self, item: OutboxItem) -> None:
        async with self._lock:
            self._outbox[item.id] = item

    async def delete_outbox_item(self, item_id: str) -> bool:
        async with self._lock:
            return self._outbox.pop(item_id, None) is not None

    async def clear_outbox(self) -> None:
        async with self._lock:
            self._outbox = {}

    # ========== Combined Operations ==========

    async def record_mutation(
        self, item: OutboxItem, entry: Entry | None = None
    ) -> OutboxItem:
        if item.action != OutboxAction.DELETE and entry is None:
            raise ValueError(f"{item.action.value} mutation requires an entry")

        async with self._lock:
            latest = max((queued.queued_at for queued in self._outbox.values()), default=None)
            item = item.queued_after(latest)
            if item.action == OutboxAction.DELETE:
                self._entries.pop(item.entry_id, None)
            elif entry is not None:
                self._entries[entry.id] = entry
            self._outbox[item.id] = item
        return item

    async def complete_outbox_item(
        self, item: OutboxItem, confirmed: Entry | None = None
    ) -> bool:
        async with self._lock:
            self._outbox.pop(item.id, None)
            if any(other.entry_id == item.entry_id for other in self._outbox.values()):
                return False
            if item.action == OutboxAction.DELETE:
                self._entries.pop(item.entry_id, None)
                return True
            if confirmed is None:
                return False
            if confirmed.id != item.entry_id:
                self._entries.pop(item.entry_id, None)
            self._entries[confirmed.id] = confirmed.with_status(SyncStatus.SYNCED)
            return True

    async def reconcile_entries(self, remote: list[Entry], merge: EntryMerge) -> list[Entry]:
        async with self._lock:
            pending = [entry for entry in self._entries.values() if entry.is_pending]
            deleted = {i.entry_id for i in self._outbox.values()} - set(self._entries)
            merged = merge([e for e in remote if e.id not in deleted], pending)
            self._entries = {entry.id: entry for entry in merged}
        return merged
