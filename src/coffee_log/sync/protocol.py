"""Sync state and status data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SyncState(StrEnum):
    """Sync engine state. There is no terminal state."""

    IDLE = "idle"
    SYNCING = "syncing"
    OFFLINE = "offline"


@dataclass(frozen=True)
class SyncSnapshot:
    """Read-only view of the engine, published to subscribers on every change."""

    state: SyncState = SyncState.IDLE
    last_error: str | None = None
    error_kind: str | None = None  # "network", "validation", "not_found", "remote"
    outbox_depth: int = 0
    pending_count: int = 0
    last_synced_at: str | None = None


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sync pass."""

    ran: bool  # False when the request was dropped or short-circuited offline
    state: SyncState
    drained: int = 0
    remaining: int = 0
    reconciled: bool = False
    entry_count: int = 0
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.ran and self.error is None
