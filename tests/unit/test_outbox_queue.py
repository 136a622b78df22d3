"""Tests for OutboxQueue ordering and bookkeeping."""

from __future__ import annotations

from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.storage.memory_store import InMemoryStore
from coffee_log.sync.outbox import OutboxQueue


def _item(item_id: str, queued_at: str, entry_id: str = "e1") -> OutboxItem:
    return OutboxItem(
        id=item_id,
        action=OutboxAction.UPDATE,
        entry_id=entry_id,
        queued_at=queued_at,
        payload={"rating": 3},
    )


class TestOrdering:
    async def test_sorted_by_queued_at(self, store: InMemoryStore) -> None:
        queue = OutboxQueue(store)
        await queue.enqueue(_item("o3", "2024-05-01T10:00:00.000003Z"))
        await queue.enqueue(_item("o1", "2024-05-01T10:00:00.000001Z"))
        await queue.enqueue(_item("o2", "2024-05-01T10:00:00.000002Z"))

        assert [item.id for item in await queue.list_ordered()] == ["o1", "o2", "o3"]

    async def test_ties_keep_insertion_order(self, store: InMemoryStore) -> None:
        queue = OutboxQueue(store)
        for item_id in ("b", "a", "c"):
            await queue.enqueue(_item(item_id, "t1"))

        assert [item.id for item in await queue.list_ordered()] == ["b", "a", "c"]

    async def test_no_coalescing(self, store: InMemoryStore) -> None:
        """Repeated edits of one entry are all retained."""
        queue = OutboxQueue(store)
        for n in range(3):
            await queue.enqueue(_item(f"o{n}", f"t{n}"))

        assert await queue.depth() == 3
        assert len(await queue.items_for("e1")) == 3


class TestBookkeeping:
    async def test_remove(self, store: InMemoryStore) -> None:
        queue = OutboxQueue(store)
        await queue.enqueue(_item("o1", "t1"))
        await queue.enqueue(_item("o2", "t2"))

        assert await queue.remove("o1") is True
        assert await queue.remove("o1") is False
        assert [item.id for item in await queue.list_ordered()] == ["o2"]

    async def test_items_for_filters_by_entry(self, store: InMemoryStore) -> None:
        queue = OutboxQueue(store)
        await queue.enqueue(_item("o2", "t2", entry_id="e2"))
        await queue.enqueue(_item("o1", "t1", entry_id="e1"))
        await queue.enqueue(
            OutboxItem(id="o3", action=OutboxAction.DELETE, entry_id="e2", queued_at="t3")
        )

        assert [item.id for item in await queue.items_for("e2")] == ["o2", "o3"]
        assert await queue.items_for("missing") == []

    async def test_empty_queue(self, store: InMemoryStore) -> None:
        queue = OutboxQueue(store)

        assert await queue.list_ordered() == []
        assert await queue.depth() == 0
