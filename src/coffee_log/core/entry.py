"""Journal entry data structures."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4

from coffee_log.errors import EntryValidationError
from coffee_log.utils.timeutils import now_iso, parse_iso

MIN_RATING = 0
MAX_RATING = 5

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class SyncStatus(StrEnum):
    """Whether an entry has unconfirmed local changes."""

    SYNCED = "synced"
    PENDING = "pending"


@dataclass(frozen=True)
class Entry:
    """
    A single brew recorded in the journal.

    Entries are immutable; edits produce a new Entry via ``with_changes``.
    Timestamps are RFC 3339 strings exactly as exchanged with the server.

    Attributes:
        id: Opaque identifier, unique within the local store
        beans: Bean origin or blend name
        brew_method: Preset id (``pour_over``) or free text
        notes: Free text tasting notes
        rating: Integer score in [0, 5]
        brewed_at: When the coffee was brewed
        created_at: Creation time (server-assigned once synced)
        updated_at: Last modification time
        sync_status: ``pending`` while an outbox item references this entry
    """

    id: str
    beans: str
    brew_method: str
    notes: str = ""
    rating: int = 0
    brewed_at: str = ""
    created_at: str = ""
    updated_at: str = ""
    sync_status: SyncStatus = SyncStatus.PENDING

    def __post_init__(self) -> None:
        if isinstance(self.rating, bool) or not isinstance(self.rating, int):
            raise EntryValidationError(f"rating must be an integer, got {self.rating!r}")
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise EntryValidationError(
                f"rating must be between {MIN_RATING} and {MAX_RATING}, got {self.rating}"
            )

    @classmethod
    def create(
        cls,
        beans: str,
        brew_method: str,
        brewed_at: str,
        notes: str = "",
        rating: int = 0,
        entry_id: str | None = None,
    ) -> Entry:
        """
        Build a new local entry awaiting its first sync.

        Text fields are trimmed; beans and brew method are required.

        Raises:
            EntryValidationError: If a required field is blank or rating is out of range
        """
        beans = beans.strip()
        brew_method = brew_method.strip()
        if not beans or not brew_method:
            raise EntryValidationError("Beans and brew method are required.")
        if not brewed_at.strip():
            raise EntryValidationError("brewed_at is required")

        now = now_iso()
        return cls(
            id=entry_id or str(uuid4()),
            beans=beans,
            brew_method=brew_method,
            notes=notes.strip(),
            rating=rating,
            brewed_at=brewed_at,
            created_at=now,
            updated_at=now,
            sync_status=SyncStatus.PENDING,
        )

    @property
    def is_pending(self) -> bool:
        return self.sync_status == SyncStatus.PENDING

    def with_changes(self, **changes: Any) -> Entry:
        """Return a locally edited copy, marked pending with a fresh ``updated_at``."""
        for key in ("beans", "brew_method", "notes"):
            if key in changes and isinstance(changes[key], str):
                changes[key] = changes[key].strip()
        if not changes.get("beans", self.beans) or not changes.get(
            "brew_method", self.brew_method
        ):
            raise EntryValidationError("Beans and brew method are required.")
        return replace(
            self,
            **changes,
            updated_at=now_iso(),
            sync_status=SyncStatus.PENDING,
        )

    def with_status(self, status: SyncStatus) -> Entry:
        return replace(self, sync_status=status)

    def to_payload(self) -> dict[str, Any]:
        """Request body for remote create/update calls."""
        return {
            "id": self.id,
            "beans": self.beans,
            "brew_method": self.brew_method,
            "notes": self.notes,
            "rating": self.rating,
            "brewed_at": self.brewed_at,
        }

    def to_dict(self) -> dict[str, Any]:
        """Full local representation, including ``sync_status``."""
        return {
            **self.to_payload(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "sync_status": self.sync_status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entry:
        """Rebuild an entry from ``to_dict`` output. Missing or null fields read as empty."""
        return cls(
            id=str(data["id"]),
            beans=data.get("beans") or "",
            brew_method=data.get("brew_method") or "",
            notes=data.get("notes") or "",
            rating=int(data.get("rating") or 0),
            brewed_at=data.get("brewed_at") or "",
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
            sync_status=SyncStatus(data.get("sync_status") or SyncStatus.PENDING),
        )

    @classmethod
    def from_server(cls, data: dict[str, Any]) -> Entry:
        """Build a confirmed entry from a canonical server record."""
        return replace(cls.from_dict(data), sync_status=SyncStatus.SYNCED)


def _brewed_key(entry: Entry) -> datetime:
    try:
        return parse_iso(entry.brewed_at)
    except ValueError:
        return _EPOCH


def sort_entries(entries: list[Entry]) -> list[Entry]:
    """Newest brew first, the order the journal is displayed in."""
    return sorted(entries, key=_brewed_key, reverse=True)
