"""Datetime utility functions for consistent timezone handling."""

from datetime import date, datetime, timezone


def get_current_utc_datetime() -> datetime:
    """Timezone-aware now() in UTC; every stored timestamp uses this."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_today() -> date:
    return get_current_utc_datetime().date()
