"""SQLite outbox collection operations mixin."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from coffee_log.core.entry import SyncStatus
from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.errors import StoreError
from coffee_log.storage.sqlite_entries import _UPSERT_ENTRY, _entry_params

if TYPE_CHECKING:
    import asyncio

    import aiosqlite

    from coffee_log.core.entry import Entry

logger = logging.getLogger(__name__)

_UPSERT_ITEM = """INSERT INTO outbox (id, action, entry_id, payload, queued_at)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        action = excluded.action,
        entry_id = excluded.entry_id,
        payload = excluded.payload,
        queued_at = excluded.queued_at"""


class SQLiteOutboxMixin:
    """Mixin providing the ``outbox`` collection and combined mutations."""

    # ------------------------------------------------------------------
    # Protocol stubs: satisfied by SQLiteStore at runtime.
    # ------------------------------------------------------------------

    _lock: asyncio.Lock

    def _ensure_conn(self) -> aiosqlite.Connection:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_outbox_items(self) -> list[OutboxItem]:
        """All items, in insertion order."""
        conn = self._ensure_conn()
        async with self._lock:
            async with conn.execute(
                "SELECT id, action, entry_id, payload, queued_at FROM outbox ORDER BY seq ASC"
            ) as cursor:
                rows = await cursor.fetchall()
        return [_row_to_item(dict(row)) for row in rows]

    async def put_outbox_item(self, item: OutboxItem) -> None:
        conn = self._ensure_conn()
        async with self._lock:
            await conn.execute(_UPSERT_ITEM, _item_params(item))
            await conn.commit()

    async def delete_outbox_item(self, item_id: str) -> bool:
        conn = self._ensure_conn()
        async with self._lock:
            cursor = await conn.execute("DELETE FROM outbox WHERE id = ?", (item_id,))
            await conn.commit()
        return cursor.rowcount > 0

    async def clear_outbox(self) -> None:
        conn = self._ensure_conn()
        async with self._lock:
            await conn.execute("DELETE FROM outbox")
            await conn.commit()

    async def record_mutation(
        self, item: OutboxItem, entry: Entry | None = None
    ) -> OutboxItem:
        if item.action != OutboxAction.DELETE and entry is None:
            raise ValueError(f"{item.action.value} mutation requires an entry")

        conn = self._ensure_conn()
        async with self._lock:
            try:
                async with conn.execute("SELECT MAX(queued_at) FROM outbox") as cursor:
                    row = await cursor.fetchone()
                item = item.queued_after(row[0] if row else None)
                if item.action == OutboxAction.DELETE:
                    await conn.execute("DELETE FROM entries WHERE id = ?", (item.entry_id,))
                elif entry is not None:
                    await conn.execute(_UPSERT_ENTRY, _entry_params(entry))
                await conn.execute(_UPSERT_ITEM, _item_params(item))
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        return item

    async def complete_outbox_item(
        self, item: OutboxItem, confirmed: Entry | None = None
    ) -> bool:
        conn = self._ensure_conn()
        async with self._lock:
            try:
                await conn.execute("DELETE FROM outbox WHERE id = ?", (item.id,))
                async with conn.execute(
                    "SELECT 1 FROM outbox WHERE entry_id = ? LIMIT 1", (item.entry_id,)
                ) as cursor:
                    still_queued = await cursor.fetchone() is not None

                # Later queued changes own the local copy
                written = not still_queued and (
                    item.action == OutboxAction.DELETE or confirmed is not None
                )
                if written and (confirmed is None or confirmed.id != item.entry_id):
                    await conn.execute("DELETE FROM entries WHERE id = ?", (item.entry_id,))
                if written and confirmed is not None and item.action != OutboxAction.DELETE:
                    synced = confirmed.with_status(SyncStatus.SYNCED)
                    await conn.execute(_UPSERT_ENTRY, _entry_params(synced))
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        return written


def _item_params(item: OutboxItem) -> tuple[Any, ...]:
    return (
        item.id,
        item.action.value,
        item.entry_id,
        json.dumps(item.payload) if item.payload is not None else None,
        item.queued_at,
    )


def _row_to_item(row: dict[str, Any]) -> OutboxItem:
    """Convert a database row dict to an OutboxItem."""
    try:
        return OutboxItem(
            id=str(row["id"]),
            action=OutboxAction(row["action"]),
            entry_id=str(row["entry_id"]),
            queued_at=str(row["queued_at"]),
            payload=json.loads(row["payload"]) if row["payload"] else None,
        )
    except (KeyError, ValueError) as e:
        raise StoreError(f"Unreadable outbox row {row.get('id')!r}: {e}") from e
