"""
Storage abstraction layer for uploaded files.

This package provides the backend contract every storage implementation
follows, and the local filesystem backend that stores file data next to a
JSON metadata sidecar.
"""

from filedrop.storage.base import MetaStorageBackend, StorageBackend
from filedrop.storage.local import LocalfsBackend
from filedrop.storage.metadata import Metadata
from filedrop.storage.expiry import NEVER_EXPIRE, compute_expiry, is_expired
from filedrop.storage.exceptions import (
    BadMetadataError,
    FileEmptyError,
    FileTooLargeError,
    InvalidDeleteKeyError,
    InvalidKeyError,
    NotFoundError,
    StorageError,
)

__all__ = [
    "StorageBackend",
    "MetaStorageBackend",
    "LocalfsBackend",
    "Metadata",
    "NEVER_EXPIRE",
    "compute_expiry",
    "is_expired",
    "StorageError",
    "NotFoundError",
    "BadMetadataError",
    "FileEmptyError",
    "FileTooLargeError",
    "InvalidKeyError",
    "InvalidDeleteKeyError",
]
