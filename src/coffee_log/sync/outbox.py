"""Ordered outbox queue persisted in the local store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coffee_log.core.entry import Entry
    from coffee_log.core.outbox import OutboxItem
    from coffee_log.storage.base import LocalStore

logger = logging.getLogger(__name__)


class OutboxQueue:
    """The ordered record of not-yet-confirmed local mutations.

    Ordering is ascending ``queued_at`` with ties broken by insertion
    order. No coalescing: several items for the same entry are all kept
    and replayed in order.
    """

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    async def enqueue(self, item: OutboxItem) -> None:
        """Append an item on its own. UI mutations use ``LocalStore.record_mutation``."""
        await self._store.put_outbox_item(item)
        logger.debug("Queued %s for entry %s (%s)", item.action, item.entry_id, item.id)

    async def list_ordered(self) -> list[OutboxItem]:
        items = await self._store.get_outbox_items()
        # sorted() is stable; the store returns insertion order
        return sorted(items, key=lambda item: item.queued_at)

    async def remove(self, item_id: str) -> bool:
        removed = await self._store.delete_outbox_item(item_id)
        if removed:
            logger.debug("Removed outbox item %s", item_id)
        return removed

    async def depth(self) -> int:
        return len(await self._store.get_outbox_items())

    async def items_for(self, entry_id: str) -> list[OutboxItem]:
        """Queued items referencing ``entry_id``, in drain order."""
        return [item for item in await self.list_ordered() if item.entry_id == entry_id]

    async def complete(self, item: OutboxItem, confirmed: Entry | None = None) -> bool:
        """Drop a confirmed item and write ``confirmed`` back if nothing newer is queued.

        Returns True when the local copy was updated (or, for a delete, removed).
        """
        written = await self._store.complete_outbox_item(item, confirmed)
        logger.debug("Completed outbox item %s (local write-back: %s)", item.id, written)
        return written
