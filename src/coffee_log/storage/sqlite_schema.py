"""SQLite schema definition for the local journal store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import aiosqlite

logger = logging.getLogger(__name__)

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (version INTEGER PRIMARY KEY);

CREATE TABLE IF NOT EXISTS entries (
    id TEXT PRIMARY KEY,
    beans TEXT NOT NULL,
    brew_method TEXT NOT NULL,
    notes TEXT NOT NULL DEFAULT '',
    rating INTEGER NOT NULL DEFAULT 0 CHECK (rating BETWEEN 0 AND 5),
    brewed_at TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT '',
    sync_status TEXT NOT NULL DEFAULT 'pending'
);
CREATE INDEX IF NOT EXISTS idx_entries_sync_status ON entries(sync_status);

-- seq preserves insertion order for items enqueued with equal queued_at
CREATE TABLE IF NOT EXISTS outbox (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    action TEXT NOT NULL CHECK (action IN ('create', 'update', 'delete')),
    entry_id TEXT NOT NULL,
    payload TEXT,
    queued_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_outbox_order ON outbox(queued_at, seq);
"""

# (from_version, to_version) -> statements
MIGRATIONS: dict[tuple[int, int], list[str]] = {}


async def run_migrations(conn: aiosqlite.Connection, current_version: int) -> int:
    """Apply all pending migrations from current_version to SCHEMA_VERSION.

    Returns the final schema version after all migrations.
    """
    version = current_version

    while version < SCHEMA_VERSION:
        next_version = version + 1
        for sql in MIGRATIONS.get((version, next_version), []):
            await conn.execute(sql)
        await conn.execute("UPDATE schema_version SET version = ?", (next_version,))
        await conn.commit()
        logger.info("Migrated local store schema %d -> %d", version, next_version)
        version = next_version

    return version
