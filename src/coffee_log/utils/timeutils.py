"""UTC time helpers shared by the models and the sync engine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_iso(value: datetime) -> str:
    """Format a datetime as RFC 3339 with a ``Z`` suffix.

    Naive datetimes are assumed to already be UTC. Microseconds are kept
    so that values produced in quick succession still sort correctly.
    """
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="microseconds") + "Z"


def parse_iso(raw: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def now_iso() -> str:
    return to_iso(utcnow())


def later_than(candidate: str, floor: str | None) -> str:
    """Return ``candidate``, or ``floor`` plus one microsecond if not strictly later.

    Both values are expected in ``to_iso`` format, which sorts chronologically
    as plain strings. An unparseable ``floor`` leaves ``candidate`` unchanged.
    """
    if floor is None or candidate > floor:
        return candidate
    try:
        return to_iso(parse_iso(floor) + timedelta(microseconds=1))
    except ValueError:
        return candidate
