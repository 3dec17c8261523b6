"""
Expiry policy for stored files.

Large files are never allowed an unlimited or very long lifetime, whatever
the uploader requested. Small files may ask for any lifetime, including
none at all.
"""
from datetime import datetime, timedelta

from filedrop.utils.datetime import ensure_aware, from_unix, utcnow

# Persisted as 0 in the metadata sidecar.
NEVER_EXPIRE = from_unix(0)


def compute_expiry(
    requested: timedelta | None,
    size: int,
    max_duration: timedelta,
    max_duration_size: int,
    now: datetime | None = None,
) -> datetime:
    """
    Compute the expiry instant of a newly stored file.

    Args:
        requested: Lifetime asked for by the uploader. None or zero means
            the uploader did not ask for one.
        size: Size of the stored file in bytes
        max_duration: Longest lifetime allowed for large files. Zero means
            large files without a requested lifetime never expire
        max_duration_size: Files strictly larger than this many bytes are
            subject to max_duration
        now: Reference time (default: current UTC time)

    Returns:
        Aware UTC datetime truncated to whole seconds, or NEVER_EXPIRE
    """
    now = ensure_aware(now) if now is not None else utcnow()
    now = now.replace(microsecond=0)
    large = size > max_duration_size

    if not requested:
        if large and max_duration > timedelta(0):
            return now + max_duration
        return NEVER_EXPIRE

    if large and requested > max_duration:
        return now + max_duration
    return now + requested


def is_expired(expiry: datetime, now: datetime | None = None) -> bool:
    """Return True if the expiry instant has passed. NEVER_EXPIRE never does."""
    expiry = ensure_aware(expiry)
    if expiry == NEVER_EXPIRE:
        return False
    now = ensure_aware(now) if now is not None else utcnow()
    return expiry < now
