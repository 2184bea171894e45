"""Datetime helpers.

MongoDB hands back naive datetimes, so everything stored is naive UTC. Aware
values coming from clients are converted on the way in and tagged as UTC on
the way out.
"""

from datetime import date, datetime, timezone
from typing import Optional


def to_millis(value: datetime) -> datetime:
    # Mongo keeps millisecond precision; truncate so stored and in-memory values agree
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utcnow() -> datetime:
    return to_millis(datetime.now(timezone.utc).replace(tzinfo=None))


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return to_millis(value)


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime string into naive UTC.

    Accepts a trailing ``Z``; sub-millisecond digits are dropped. Returns
    ``None`` when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return to_naive_utc(parsed)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
