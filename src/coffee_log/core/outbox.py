"""Outbox item data structures."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any
from uuid import uuid4

from coffee_log.utils.timeutils import later_than, now_iso


class OutboxAction(StrEnum):
    """Kind of mutation recorded in the outbox."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class OutboxItem:
    """
    A durable record of one local mutation not yet confirmed by the server.

    ``entry_id`` references the affected entry; it is not an ownership
    relation, the entry may already be gone locally (delete).
    ``queued_at`` is the total order key for draining.
    """

    id: str
    action: OutboxAction
    entry_id: str
    queued_at: str
    payload: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.action != OutboxAction.DELETE and self.payload is None:
            raise ValueError(f"{self.action.value} outbox item requires a payload")

    @classmethod
    def create(
        cls,
        action: OutboxAction,
        entry_id: str,
        payload: dict[str, Any] | None = None,
        queued_at: str | None = None,
        item_id: str | None = None,
    ) -> OutboxItem:
        """Factory with generated id and enqueue timestamp."""
        return cls(
            id=item_id or str(uuid4()),
            action=OutboxAction(action),
            entry_id=entry_id,
            queued_at=queued_at or now_iso(),
            payload=dict(payload) if payload is not None else None,
        )

    def queued_after(self, floor: str | None) -> OutboxItem:
        """Copy whose ``queued_at`` sorts strictly after ``floor``.

        Keeps drain order intact when the wall clock steps backwards.
        """
        queued_at = later_than(self.queued_at, floor)
        if queued_at == self.queued_at:
            return self
        return replace(self, queued_at=queued_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action.value,
            "entry_id": self.entry_id,
            "queued_at": self.queued_at,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OutboxItem:
        return cls(
            id=str(data["id"]),
            action=OutboxAction(data["action"]),
            entry_id=str(data["entry_id"]),
            queued_at=str(data["queued_at"]),
            payload=data.get("payload"),
        )
