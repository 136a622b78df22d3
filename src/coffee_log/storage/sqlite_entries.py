"""SQLite entry collection operations mixin."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from coffee_log.core.entry import Entry, SyncStatus
from coffee_log.errors import StoreError

if TYPE_CHECKING:
    import asyncio

    import aiosqlite

    from coffee_log.storage.base import EntryMerge

logger = logging.getLogger(__name__)

_ENTRY_COLUMNS = (
    "id, beans, brew_method, notes, rating, brewed_at, created_at, updated_at, sync_status"
)
_UPSERT_ENTRY = f"""INSERT INTO entries ({_ENTRY_COLUMNS})
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        beans = excluded.beans,
        brew_method = excluded.brew_method,
        notes = excluded.notes,
        rating = excluded.rating,
        brewed_at = excluded.brewed_at,
        created_at = excluded.created_at,
        updated_at = excluded.updated_at,
        sync_status = excluded.sync_status"""


class SQLiteEntriesMixin:
    """Mixin providing the ``entries`` collection."""

    # ------------------------------------------------------------------
    # Protocol stubs: satisfied by SQLiteStore at runtime.
    # ------------------------------------------------------------------

    _lock: asyncio.Lock

    def _ensure_conn(self) -> aiosqlite.Connection:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_all_entries(self) -> list[Entry]:
        conn = self._ensure_conn()
        async with self._lock:
            async with conn.execute(f"SELECT {_ENTRY_COLUMNS} FROM entries") as cursor:
                rows = await cursor.fetchall()
        return [_row_to_entry(dict(row)) for row in rows]

    async def get_entry(self, entry_id: str) -> Entry | None:
        conn = self._ensure_conn()
        async with self._lock:
            async with conn.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE id = ?", (entry_id,)
            ) as cursor:
                row = await cursor.fetchone()
        return _row_to_entry(dict(row)) if row else None

    async def put_entry(self, entry: Entry) -> None:
        conn = self._ensure_conn()
        async with self._lock:
            await conn.execute(_UPSERT_ENTRY, _entry_params(entry))
            await conn.commit()

    async def delete_entry(self, entry_id: str) -> bool:
        conn = self._ensure_conn()
        async with self._lock:
            cursor = await conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
            await conn.commit()
        return cursor.rowcount > 0

    async def clear_entries(self) -> None:
        conn = self._ensure_conn()
        async with self._lock:
            await conn.execute("DELETE FROM entries")
            await conn.commit()

    async def replace_entries(self, entries: list[Entry]) -> None:
        conn = self._ensure_conn()
        async with self._lock:
            await _swap_entries(conn, entries)
        logger.debug("Replaced entries collection with %d rows", len(entries))

    async def reconcile_entries(self, remote: list[Entry], merge: EntryMerge) -> list[Entry]:
        conn = self._ensure_conn()
        async with self._lock:
            async with conn.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE sync_status = ?",
                (SyncStatus.PENDING.value,),
            ) as cursor:
                rows = await cursor.fetchall()
            # Queued but absent locally: deleted here, not yet on the server
            async with conn.execute(
                "SELECT entry_id FROM outbox WHERE entry_id NOT IN (SELECT id FROM entries)"
            ) as cursor:
                deleted = {row[0] for row in await cursor.fetchall()}
            pending = [_row_to_entry(dict(row)) for row in rows]
            merged = merge([e for e in remote if e.id not in deleted], pending)
            await _swap_entries(conn, merged)
        return merged


async def _swap_entries(conn: aiosqlite.Connection, entries: list[Entry]) -> None:
    """Replace every entry row in one transaction. Caller holds the lock."""
    try:
        await conn.execute("DELETE FROM entries")
        await conn.executemany(_UPSERT_ENTRY, [_entry_params(e) for e in entries])
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


def _entry_params(entry: Entry) -> tuple[Any, ...]:
    return (
        entry.id,
        entry.beans,
        entry.brew_method,
        entry.notes,
        entry.rating,
        entry.brewed_at,
        entry.created_at,
        entry.updated_at,
        entry.sync_status.value,
    )


def _row_to_entry(row: dict[str, Any]) -> Entry:
    """Convert a database row dict to an Entry."""
    try:
        return Entry(
            id=str(row["id"]),
            beans=str(row["beans"]),
            brew_method=str(row["brew_method"]),
            notes=str(row["notes"] or ""),
            rating=int(row["rating"]),
            brewed_at=str(row["brewed_at"] or ""),
            created_at=str(row["created_at"] or ""),
            updated_at=str(row["updated_at"] or ""),
            sync_status=SyncStatus(row["sync_status"]),
        )
    except (KeyError, ValueError) as e:
        raise StoreError(f"Unreadable entry row {row.get('id')!r}: {e}") from e
