"""Reconciliation merge of the remote listing with pending local entries."""

from __future__ import annotations

from collections.abc import Iterable

from coffee_log.core.entry import Entry


def merge_entries(remote: Iterable[Entry], pending: Iterable[Entry]) -> list[Entry]:
    """Merge the canonical remote listing with still-pending local entries.

    Pending wins: a pending local entry replaces the remote entry with the
    same id, keeping the remote position. Pending entries unknown to the
    remote (not yet created there) follow, in their given order. Remote
    duplicates of an id keep the first occurrence.

    Pure and deterministic; neither input is modified.
    """
    pending_by_id: dict[str, Entry] = {}
    for entry in pending:
        pending_by_id.setdefault(entry.id, entry)

    merged: list[Entry] = []
    seen: set[str] = set()

    for entry in remote:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        merged.append(pending_by_id.get(entry.id, entry))

    for entry_id, entry in pending_by_id.items():
        if entry_id not in seen:
            seen.add(entry_id)
            merged.append(entry)

    return merged
