"""Core data structures: journal entries and outbox items."""

from coffee_log.core.entry import Entry, SyncStatus
from coffee_log.core.outbox import OutboxAction, OutboxItem

__all__ = [
    "Entry",
    "SyncStatus",
    "OutboxAction",
    "OutboxItem",
]
