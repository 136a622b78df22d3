"""SQLite storage backend for the local journal."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiosqlite

from coffee_log.errors import StoreError
from coffee_log.storage.base import LocalStore
from coffee_log.storage.sqlite_entries import SQLiteEntriesMixin
from coffee_log.storage.sqlite_outbox import SQLiteOutboxMixin
from coffee_log.storage.sqlite_schema import SCHEMA, SCHEMA_VERSION, run_migrations

logger = logging.getLogger(__name__)


class SQLiteStore(SQLiteEntriesMixin, SQLiteOutboxMixin, LocalStore):
    """SQLite-based local store.

    Data persists to disk and survives restarts. All statements share one
    connection and are serialized through an asyncio lock, so a multi-statement
    transaction is never interleaved with another task's read.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path).resolve()
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Open the database and bring the schema up to date."""
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row

        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA synchronous=NORMAL")

        await self._conn.executescript(SCHEMA)

        async with self._conn.execute("SELECT version FROM schema_version") as cursor:
            row = await cursor.fetchone()

        if row is None:
            await self._conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )
            await self._conn.commit()
        elif row["version"] < SCHEMA_VERSION:
            await run_migrations(self._conn, row["version"])

        logger.debug("Opened local store at %s", self._db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> SQLiteStore:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _ensure_conn(self) -> aiosqlite.Connection:
        """Ensure connection is available."""
        if self._conn is None:
            raise StoreError("Database not initialized. Call initialize() first.")
        return self._conn
