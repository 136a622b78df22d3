"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio

from coffee_log.core.entry import Entry, SyncStatus, sort_entries
from coffee_log.errors import NotFoundError, RemoteError, RemoteValidationError
from coffee_log.journal import Journal
from coffee_log.remote.base import RemoteClient
from coffee_log.storage.memory_store import InMemoryStore
from coffee_log.sync.connectivity import ConnectivityMonitor
from coffee_log.sync.sync_engine import SyncEngine


class FakeRemote(RemoteClient):
    """In-memory stand-in for the journal backend.

    Behaves like the real server: keeps client ids, assigns timestamps,
    preserves ``created_at`` on update, rejects updates of unknown ids and
    lists newest brew first. Failures and latency are switchable per test.
    """

    def __init__(self) -> None:
        self.entries: dict[str, Entry] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_with: RemoteError | None = None
        self.fail_on: set[str] = set()  # empty means every operation fails
        self.strict_delete = False  # raise NotFoundError for absent ids
        self.delay = 0.0
        self._clock = 0

    def seed(self, *entries: Entry) -> None:
        for entry in entries:
            self.entries[entry.id] = entry.with_status(SyncStatus.SYNCED)

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls if op != "list"]

    async def _call(self, op: str, ident: str = "") -> None:
        self.calls.append((op, ident))
        await asyncio.sleep(self.delay)
        if self.fail_with is not None and (not self.fail_on or op in self.fail_on):
            raise self.fail_with

    def _stamp(self) -> str:
        self._clock += 1
        return f"2024-06-01T00:00:{self._clock:02d}Z"

    async def list(self) -> list[Entry]:
        await self._call("list")
        return sort_entries(list(self.entries.values()))

    async def create(self, payload: dict[str, Any]) -> Entry:
        await self._call("create", payload.get("id", ""))
        if not payload.get("beans") or not payload.get("brew_method"):
            raise RemoteValidationError("beans is required", status_code=400)
        stamp = self._stamp()
        entry = Entry.from_server({**payload, "created_at": stamp, "updated_at": stamp})
        self.entries[entry.id] = entry
        return entry

    async def update(self, entry_id: str, payload: dict[str, Any]) -> Entry:
        await self._call("update", entry_id)
        existing = self.entries.get(entry_id)
        if existing is None:
            raise NotFoundError("entry not found", status_code=404)
        entry = Entry.from_server(
            {
                **payload,
                "id": entry_id,
                "created_at": existing.created_at,
                "updated_at": self._stamp(),
            }
        )
        self.entries[entry_id] = entry
        return entry

    async def delete(self, entry_id: str) -> None:
        await self._call("delete", entry_id)
        if self.entries.pop(entry_id, None) is None and self.strict_delete:
            raise NotFoundError("entry not found", status_code=404)


@pytest.fixture
def store() -> InMemoryStore:
    """Create an empty in-memory local store."""
    return InMemoryStore()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    """A reachable connectivity signal driven by the test."""
    return ConnectivityMonitor(reachable=True)


@pytest_asyncio.fixture
async def engine(
    store: InMemoryStore, remote: FakeRemote, connectivity: ConnectivityMonitor
) -> AsyncGenerator[SyncEngine, None]:
    """Create a started sync engine; waits for any spawned pass on teardown."""
    sync_engine = SyncEngine(store, remote, connectivity)
    sync_engine.start()
    yield sync_engine
    sync_engine.stop()
    await sync_engine.wait()


@pytest.fixture
def journal(store: InMemoryStore, engine: SyncEngine) -> Journal:
    """Journal that only queues; tests trigger sync passes explicitly."""
    return Journal(store, engine, auto_sync=False)
