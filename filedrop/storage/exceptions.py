"""
Storage-specific exceptions.

These exceptions let callers tell apart the failure kinds of storage
operations. Underlying filesystem failures are not wrapped: they propagate
as the builtin OSError subclasses.
"""


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class NotFoundError(StorageError):
    """Raised when no object is stored under the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"File not found: {key}")


class BadMetadataError(StorageError):
    """Raised when the metadata sidecar exists but cannot be read or parsed."""

    def __init__(self, key: str, reason: str = ""):
        self.key = key
        self.reason = reason
        message = f"Unreadable metadata for file: {key}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class FileEmptyError(StorageError):
    """Raised when an upload contains no bytes."""

    def __init__(self):
        super().__init__("Empty file")


class FileTooLargeError(StorageError):
    """Raised when an upload reaches the configured maximum size."""

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(
            f"File too large: uploads must be smaller than {max_size} bytes"
        )


class InvalidKeyError(StorageError):
    """Raised when a key cannot be mapped to a single file name."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Invalid storage key: {key!r}")


class InvalidDeleteKeyError(StorageError):
    """Raised when a file would be stored without a delete key."""

    def __init__(self):
        super().__init__("A non-empty delete key is required")
