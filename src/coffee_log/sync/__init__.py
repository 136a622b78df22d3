"""Offline synchronization: outbox queue, merge and sync engine."""

from coffee_log.sync.connectivity import ConnectivityMonitor, HttpProbeConnectivity
from coffee_log.sync.merge import merge_entries
from coffee_log.sync.outbox import OutboxQueue
from coffee_log.sync.protocol import SyncResult, SyncSnapshot, SyncState
from coffee_log.sync.sync_engine import SyncEngine

__all__ = [
    "ConnectivityMonitor",
    "HttpProbeConnectivity",
    "merge_entries",
    "OutboxQueue",
    "SyncResult",
    "SyncSnapshot",
    "SyncState",
    "SyncEngine",
]
