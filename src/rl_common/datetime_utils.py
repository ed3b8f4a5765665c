"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def days_ago(days: int, now: datetime | None = None) -> datetime:
    """Return the UTC instant `days` whole days before `now`."""
    return (now or utc_now()) - timedelta(days=days)


def isoformat_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
