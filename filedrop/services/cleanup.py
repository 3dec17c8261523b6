"""
Cleanup service for expired files.

This module deletes stored files whose expiry has passed. It only relies on
the listing and read operations of the storage contract, so it works with
any backend that can enumerate its keys.
"""
from datetime import datetime

from filedrop.dependencies.storage import get_storage
from filedrop.logging_config import setup_logging
from filedrop.storage.base import MetaStorageBackend
from filedrop.storage.exceptions import BadMetadataError, NotFoundError
from filedrop.storage.expiry import is_expired

logger = setup_logging()


async def cleanup_expired_files(
    storage: MetaStorageBackend | None = None,
    now: datetime | None = None,
) -> int:
    """
    Delete every expired file.

    Should be run periodically (e.g., every few minutes via cron or a
    scheduler task).

    Keys whose metadata is missing or unreadable are skipped and logged,
    since their expiry cannot be known. A failure on one key does not stop
    the sweep.

    Args:
        storage: Optional storage backend. If not provided, uses get_storage().
        now: Optional reference time. Defaults to the current UTC time.

    Returns:
        Number of files deleted
    """
    if storage is None:
        storage = get_storage()

    if not isinstance(storage, MetaStorageBackend):
        raise TypeError(
            f"{type(storage).__name__} cannot list its files; "
            "expired file cleanup needs a MetaStorageBackend"
        )

    keys = await storage.list()
    logger.info(f"Checking {len(keys)} stored files for expiry")

    deleted_count = 0
    for key in keys:
        try:
            metadata = await storage.head(key)
        except (NotFoundError, BadMetadataError) as e:
            logger.warning(f"Skipping file with unusable metadata: {str(e)}")
            continue

        if not is_expired(metadata.expiry, now):
            continue

        try:
            await storage.delete(key)
            deleted_count += 1
        except Exception as e:
            logger.error(f"Failed to delete expired file key={key}: {str(e)}")

    logger.info(f"Cleaned up {deleted_count} expired files")
    return deleted_count
