"""Sync engine: drains the outbox and reconciles against the remote listing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.errors import NotFoundError, RemoteError
from coffee_log.sync.connectivity import ConnectivityMonitor
from coffee_log.sync.merge import merge_entries
from coffee_log.sync.outbox import OutboxQueue
from coffee_log.sync.protocol import SyncResult, SyncSnapshot, SyncState
from coffee_log.utils.timeutils import now_iso

if TYPE_CHECKING:
    from coffee_log.core.entry import Entry
    from coffee_log.remote.base import RemoteClient
    from coffee_log.storage.base import LocalStore

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SyncSnapshot], None]


class SyncEngine:
    """Owns the sync state machine and runs sync passes.

    A pass:
    1. Drain the outbox in order against the remote, stopping at the first failure
    2. Reconcile: merge the remote listing with pending local entries (pending wins)
    3. Replace the local entries collection in one atomic step

    At most one pass runs at a time. A request arriving while a pass is in
    flight is dropped, not queued; the next trigger (a mutation or a
    connectivity change) picks up whatever is left.
    """

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteClient,
        connectivity: ConnectivityMonitor | None = None,
    ) -> None:
        self._store = store
        self._remote = remote
        self._outbox = OutboxQueue(store)
        self._connectivity = connectivity or ConnectivityMonitor()
        self._snapshot = SyncSnapshot()
        self._listeners: list[SnapshotListener] = []
        self._syncing = False
        self._task: asyncio.Task[SyncResult] | None = None
        self._started = False
        self._drained = 0

    @property
    def state(self) -> SyncState:
        return self._snapshot.state

    @property
    def snapshot(self) -> SyncSnapshot:
        """Latest published status. Immutable."""
        return self._snapshot

    @property
    def outbox(self) -> OutboxQueue:
        return self._outbox

    @property
    def connectivity(self) -> ConnectivityMonitor:
        return self._connectivity

    @property
    def is_syncing(self) -> bool:
        return self._pass_in_flight()

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Begin reacting to connectivity transitions."""
        if self._started:
            return
        self._connectivity.add_listener(self._on_connectivity_change)
        self._started = True

    def stop(self) -> None:
        self._connectivity.remove_listener(self._on_connectivity_change)
        self._started = False

    async def wait(self) -> SyncResult | None:
        """Wait for the in-flight pass spawned by ``request_sync``, if any."""
        task = self._task
        if task is None:
            return None
        return await task

    # ── Observation ──────────────────────────────────────────────────────

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self._listeners = [cb for cb in self._listeners if cb != listener]

        return unsubscribe

    async def refresh(self) -> SyncSnapshot:
        """Recount outbox depth and pending entries, then publish."""
        items = await self._store.get_outbox_items()
        entries = await self._store.get_all_entries()
        self._publish(
            outbox_depth=len(items),
            pending_count=sum(1 for entry in entries if entry.is_pending),
        )
        return self._snapshot

    # ── Triggers ─────────────────────────────────────────────────────────

    def request_sync(self) -> asyncio.Task[SyncResult] | None:
        """Spawn a sync pass unless one is already in flight.

        Returns the spawned task, or None when the request was dropped.
        """
        if self._pass_in_flight():
            logger.debug("Sync already in progress; request dropped")
            return None
        self._task = asyncio.create_task(self.sync_once())
        return self._task

    async def sync_once(self) -> SyncResult:
        """Run one drain-then-reconcile pass inline."""
        if self._syncing:
            logger.debug("Sync already in progress; pass skipped")
            return SyncResult(ran=False, state=self.state)

        if not self._connectivity.is_reachable:
            logger.info("Sync requested while unreachable; staying offline")
            self._publish(state=SyncState.OFFLINE)
            await self.refresh()
            return SyncResult(
                ran=False,
                state=SyncState.OFFLINE,
                remaining=self._snapshot.outbox_depth,
            )

        # Flag is set before the first await so a concurrent pass cannot start.
        self._syncing = True
        self._drained = 0
        try:
            return await self._run_pass()
        finally:
            self._syncing = False

    # ── Pass ─────────────────────────────────────────────────────────────

    async def _run_pass(self) -> SyncResult:
        self._publish(state=SyncState.SYNCING, last_error=None, error_kind=None)
        logger.info("Sync pass started")

        try:
            await self._drain()
            merged = await self._reconcile()
        except RemoteError as e:
            logger.warning("Sync pass aborted after %d item(s): %s", self._drained, e.message)
            return await self._finish_offline(e.message, e.kind)
        except Exception as e:
            logger.warning("Sync pass failed unexpectedly", exc_info=True)
            return await self._finish_offline(str(e) or type(e).__name__, "internal")

        self._publish(state=SyncState.IDLE, last_synced_at=now_iso())
        await self.refresh()
        logger.info(
            "Sync pass complete: %d drained, %d entries", self._drained, len(merged)
        )
        return SyncResult(
            ran=True,
            state=SyncState.IDLE,
            drained=self._drained,
            remaining=self._snapshot.outbox_depth,
            reconciled=True,
            entry_count=len(merged),
        )

    async def _finish_offline(self, message: str, kind: str) -> SyncResult:
        self._publish(state=SyncState.OFFLINE, last_error=message, error_kind=kind)
        await self.refresh()
        return SyncResult(
            ran=True,
            state=SyncState.OFFLINE,
            drained=self._drained,
            remaining=self._snapshot.outbox_depth,
            error=message,
            error_kind=kind,
        )

    async def _drain(self) -> None:
        """Replay queued mutations strictly in order; stop at the first failure."""
        items = await self._outbox.list_ordered()
        if items:
            logger.debug("Draining %d outbox item(s)", len(items))

        for item in items:
            confirmed = await self._send(item)
            # The store checks the outbox as it stands now, not the list above
            written = await self._outbox.complete(item, confirmed)
            if not written and item.action != OutboxAction.DELETE:
                logger.debug("Entry %s has newer queued changes; kept local copy", item.entry_id)
            elif confirmed is not None and confirmed.id != item.entry_id:
                logger.warning("Server reassigned entry id %s -> %s", item.entry_id, confirmed.id)
            self._drained += 1

    async def _send(self, item: OutboxItem) -> Entry | None:
        """Send one outbox item to the remote. Returns the server's copy, if any."""
        if item.action == OutboxAction.DELETE:
            try:
                await self._remote.delete(item.entry_id)
            except NotFoundError:
                logger.debug("Entry %s already deleted remotely", item.entry_id)
            return None

        payload: dict[str, Any] = item.payload or {}
        if item.action == OutboxAction.CREATE:
            # The server keeps a client-chosen id; ask for the one the item tracks.
            return await self._remote.create({"id": item.entry_id, **payload})
        return await self._remote.update(item.entry_id, payload)

    async def _reconcile(self) -> list[Entry]:
        """Merge the remote listing with pending local entries and swap it in."""
        remote_entries = await self._remote.list()
        # Pending entries are read inside the store step so a concurrent edit lands
        # either before the merge or after the swap.
        merged = await self._store.reconcile_entries(remote_entries, merge_entries)
        logger.debug(
            "Reconciled %d remote entries into %d", len(remote_entries), len(merged)
        )
        return merged

    # ── Internals ────────────────────────────────────────────────────────

    def _pass_in_flight(self) -> bool:
        return self._syncing or (self._task is not None and not self._task.done())

    def _on_connectivity_change(self, reachable: bool) -> None:
        if reachable:
            self.request_sync()
        elif not self._pass_in_flight():
            self._publish(state=SyncState.OFFLINE)
        # An in-flight pass is left to fail on its own network error.

    def _publish(self, **changes: Any) -> None:
        snapshot = replace(self._snapshot, **changes)
        if snapshot == self._snapshot:
            return
        if snapshot.state != self._snapshot.state:
            logger.info("Sync state %s -> %s", self._snapshot.state, snapshot.state)
        self._snapshot = snapshot

        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.warning("Sync status listener failed", exc_info=True)
