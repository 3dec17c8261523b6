"""Datetime utilities for converting between epoch seconds and aware datetimes."""
from datetime import datetime, timezone


def ensure_aware(dt: datetime | None) -> datetime | None:
    """
    Convert naive datetime to aware UTC datetime.

    Naive values are assumed to already represent UTC, which is how
    callers building expiry instants by hand usually write them.

    Args:
        dt: A datetime object, which may be naive or aware.

    Returns:
        A timezone-aware datetime in UTC, or None if input is None.

    Examples:
        >>> from datetime import datetime, timezone
        >>> aware_dt = ensure_aware(datetime(2025, 1, 1, 12, 0))
        >>> aware_dt.tzinfo
        datetime.timezone.utc
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def from_unix(seconds: int) -> datetime:
    """Return the aware UTC datetime for whole seconds since the epoch."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def to_unix(dt: datetime) -> int:
    """
    Return whole seconds since the epoch for a datetime.

    Sub-second precision is dropped, matching what the metadata sidecar
    persists.
    """
    return int(ensure_aware(dt).timestamp())


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
