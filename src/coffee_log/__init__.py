"""Coffee Log - offline-first brew journal with outbox synchronization."""

from coffee_log.core.entry import Entry, SyncStatus
from coffee_log.core.outbox import OutboxAction, OutboxItem
from coffee_log.errors import (
    CoffeeLogError,
    EntryValidationError,
    NetworkError,
    NotFoundError,
    RemoteError,
    RemoteValidationError,
    StoreError,
)
from coffee_log.journal import Journal
from coffee_log.sync.protocol import SyncSnapshot, SyncState
from coffee_log.sync.sync_engine import SyncEngine

__version__ = "0.1.0"

__all__ = [
    # Models
    "Entry",
    "SyncStatus",
    "OutboxAction",
    "OutboxItem",
    # Sync
    "Journal",
    "SyncEngine",
    "SyncSnapshot",
    "SyncState",
    # Errors
    "CoffeeLogError",
    "EntryValidationError",
    "NetworkError",
    "NotFoundError",
    "RemoteError",
    "RemoteValidationError",
    "StoreError",
    # Version
    "__version__",
]
