"""Tests for InMemoryStore."""

from __future__ import annotations

import pytest

from coffee_log.core.entry import Entry, SyncStatus
from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.storage.memory_store import InMemoryStore


def _make_entry(entry_id: str = "e1", **overrides: object) -> Entry:
    fields: dict[str, object] = {
        "id": entry_id,
        "beans": "Sidamo",
        "brew_method": "french_press",
        "brewed_at": "2024-05-01T08:00:00Z",
    }
    fields.update(overrides)
    return Entry(**fields)  # type: ignore[arg-type]


class TestEntries:
    async def test_put_get_delete(self, store: InMemoryStore) -> None:
        entry = _make_entry()
        await store.put_entry(entry)

        assert await store.get_entry("e1") == entry
        assert await store.delete_entry("e1") is True
        assert await store.delete_entry("e1") is False
        assert await store.get_entry("e1") is None

    async def test_put_replaces_same_id(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry(notes="old"))
        await store.put_entry(_make_entry(notes="new"))

        entries = await store.get_all_entries()
        assert len(entries) == 1
        assert entries[0].notes == "new"

    async def test_replace_entries(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry("old"))

        await store.replace_entries([_make_entry("a"), _make_entry("b")])

        assert {e.id for e in await store.get_all_entries()} == {"a", "b"}

    async def test_snapshot_unaffected_by_replace(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry("old"))
        before = await store.get_all_entries()

        await store.replace_entries([_make_entry("new")])

        assert [e.id for e in before] == ["old"]

    async def test_clear(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry())
        await store.clear_entries()

        assert await store.get_all_entries() == []


class TestRecordMutation:
    async def test_create_writes_entry_and_item(self, store: InMemoryStore) -> None:
        entry = _make_entry()
        item = OutboxItem.create(OutboxAction.CREATE, entry.id, payload=entry.to_payload())

        await store.record_mutation(item, entry)

        assert await store.get_entry("e1") == entry
        assert await store.get_outbox_items() == [item]

    async def test_delete_removes_entry(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry(sync_status=SyncStatus.SYNCED))
        item = OutboxItem.create(OutboxAction.DELETE, "e1")

        await store.record_mutation(item)

        assert await store.get_entry("e1") is None
        assert [i.action for i in await store.get_outbox_items()] == [OutboxAction.DELETE]

    async def test_update_requires_entry(self, store: InMemoryStore) -> None:
        item = OutboxItem.create(OutboxAction.UPDATE, "e1", payload={"rating": 1})

        with pytest.raises(ValueError):
            await store.record_mutation(item)
        assert await store.get_outbox_items() == []


class TestOutbox:
    async def test_insertion_order_and_upsert(self, store: InMemoryStore) -> None:
        first = OutboxItem.create(OutboxAction.DELETE, "a", item_id="o1")
        second = OutboxItem.create(OutboxAction.DELETE, "b", item_id="o2")
        await store.put_outbox_item(first)
        await store.put_outbox_item(second)
        await store.put_outbox_item(OutboxItem.create(OutboxAction.DELETE, "c", item_id="o1"))

        items = await store.get_outbox_items()
        assert [i.id for i in items] == ["o1", "o2"]
        assert items[0].entry_id == "c"

    async def test_delete_and_clear(self, store: InMemoryStore) -> None:
        await store.put_outbox_item(OutboxItem.create(OutboxAction.DELETE, "a", item_id="o1"))
        await store.put_outbox_item(OutboxItem.create(OutboxAction.DELETE, "b", item_id="o2"))

        assert await store.delete_outbox_item("o1") is True
        assert await store.delete_outbox_item("o1") is False
        await store.clear_outbox()
        assert await store.get_outbox_items() == []

    async def test_queued_at_never_goes_backwards(self, store: InMemoryStore) -> None:
        entry = _make_entry()
        create = OutboxItem.create(
            OutboxAction.CREATE,
            entry.id,
            payload=entry.to_payload(),
            queued_at="2024-05-01T10:00:00.000000Z",
        )
        update = OutboxItem.create(
            OutboxAction.UPDATE,
            entry.id,
            payload=entry.to_payload(),
            queued_at="2024-05-01T09:00:00.000000Z",
        )

        await store.record_mutation(create, entry)
        stored = await store.record_mutation(update, entry)

        assert stored.queued_at == "2024-05-01T10:00:00.000001Z"
        assert [i.queued_at for i in await store.get_outbox_items()] == [
            "2024-05-01T10:00:00.000000Z",
            "2024-05-01T10:00:00.000001Z",
        ]


class TestCompleteOutboxItem:
    """Removing a confirmed item and writing the server copy back."""

    async def test_writes_confirmed_copy_as_synced(self, store: InMemoryStore) -> None:
        entry = _make_entry(notes="local")
        item = OutboxItem.create(OutboxAction.CREATE, entry.id, payload=entry.to_payload())
        await store.record_mutation(item, entry)

        written = await store.complete_outbox_item(item, _make_entry(notes="server"))

        assert written is True
        stored = await store.get_entry("e1")
        assert stored is not None
        assert stored.notes == "server"
        assert stored.sync_status == SyncStatus.SYNCED
        assert await store.get_outbox_items() == []

    async def test_newer_queued_change_keeps_local_copy(self, store: InMemoryStore) -> None:
        entry = _make_entry(notes="first")
        create = OutboxItem.create(OutboxAction.CREATE, entry.id, payload=entry.to_payload())
        await store.record_mutation(create, entry)
        edited = _make_entry(notes="second")
        update = OutboxItem.create(OutboxAction.UPDATE, entry.id, payload=edited.to_payload())
        update = await store.record_mutation(update, edited)

        written = await store.complete_outbox_item(create, _make_entry(notes="first"))

        assert written is False
        assert await store.get_entry("e1") == edited
        assert await store.get_outbox_items() == [update]

    async def test_delete_removes_entry_only_when_last(self, store: InMemoryStore) -> None:
        delete = OutboxItem.create(OutboxAction.DELETE, "e1", item_id="o1")
        await store.put_outbox_item(delete)
        await store.put_entry(_make_entry())

        assert await store.complete_outbox_item(delete) is True
        assert await store.get_entry("e1") is None

    async def test_reassigned_id_drops_old_row(self, store: InMemoryStore) -> None:
        entry = _make_entry("local-id")
        item = OutboxItem.create(OutboxAction.CREATE, entry.id, payload=entry.to_payload())
        await store.record_mutation(item, entry)

        await store.complete_outbox_item(item, _make_entry("server-id"))

        assert [e.id for e in await store.get_all_entries()] == ["server-id"]


class TestReconcileEntries:
    async def test_merges_current_pending_entries(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry("synced", sync_status=SyncStatus.SYNCED))
        await store.put_entry(_make_entry("pending"))
        seen: list[list[str]] = []

        def merge(remote: list[Entry], pending: list[Entry]) -> list[Entry]:
            seen.append([e.id for e in pending])
            return [*remote, *pending]

        merged = await store.reconcile_entries([_make_entry("remote")], merge)

        assert seen == [["pending"]]
        assert [e.id for e in merged] == ["remote", "pending"]
        assert {e.id for e in await store.get_all_entries()} == {"remote", "pending"}

    async def test_skips_remote_entries_with_queued_delete(self, store: InMemoryStore) -> None:
        await store.put_entry(_make_entry(sync_status=SyncStatus.SYNCED))
        await store.record_mutation(OutboxItem.create(OutboxAction.DELETE, "e1"))

        merged = await store.reconcile_entries(
            [_make_entry("e1", sync_status=SyncStatus.SYNCED)], lambda remote, pending: remote
        )

        assert merged == []
        assert await store.get_all_entries() == []
