"""
Storage dependency injection for FastAPI.

This module provides FastAPI dependency functions for injecting
storage backends into endpoints.
"""
from filedrop.config import settings
from filedrop.storage.base import StorageBackend
from filedrop.storage.local import LocalfsBackend


def get_storage() -> StorageBackend:
    """
    Return storage backend based on configuration.

    Handlers depend on the StorageBackend contract only, so backends can
    be switched through the STORAGE_BACKEND environment variable.

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If STORAGE_BACKEND is not supported
    """
    if settings.STORAGE_BACKEND == "local":
        return LocalfsBackend(
            meta_path=settings.META_PATH,
            files_path=settings.FILES_PATH,
            limits=settings.storage_limits(),
        )

    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")
