"""Timezone helpers. Every timestamp the service stores or compares is UTC-aware."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive values are assumed to already be UTC (SQLite drops tzinfo on the
    way back from the database).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def ensure_utc_or_none(value: datetime | None) -> datetime | None:
    return None if value is None else ensure_utc(value)
