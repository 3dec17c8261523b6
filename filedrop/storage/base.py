"""
Abstract base classes for storage backends.

This module defines the interface that all storage backends must implement.
Callers depend only on these classes, so a local filesystem backend and
object-store backends are interchangeable.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, AsyncIterator, BinaryIO

from fastapi.responses import FileResponse

from filedrop.storage.metadata import Metadata


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Every stored file is addressed by a caller-chosen key and consists of
    its data and a metadata record. Backends hold no in-memory state, so
    one instance may be shared by concurrent requests.
    """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if file data is stored under the key.

        Args:
            key: Unique identifier for the file

        Returns:
            True if the data exists, False if it does not

        Raises:
            OSError: If the check itself fails for a reason other than
                absence
        """
        pass

    @abstractmethod
    async def head(self, key: str) -> Metadata:
        """
        Read file metadata without opening the data.

        Args:
            key: Unique identifier for the file

        Returns:
            Stored metadata

        Raises:
            NotFoundError: If no metadata exists for the key
            BadMetadataError: If the metadata is unreadable or malformed
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> tuple[Metadata, Any]:
        """
        Read file metadata and open the data for reading.

        The returned stream is positioned at offset 0 and owned by the
        caller, who must close it.

        Args:
            key: Unique identifier for the file

        Returns:
            tuple of (metadata, async binary stream)

        Raises:
            NotFoundError: If no metadata exists for the key
            BadMetadataError: If the metadata is unreadable or malformed
            OSError: If the metadata is valid but the data cannot be opened
        """
        pass

    @abstractmethod
    async def put(
        self,
        key: str,
        file_stream: AsyncIterator[bytes] | BinaryIO,
        expiry: timedelta | None,
        delete_key: str,
        access_key: str = "",
        src_ip: str = "",
        original_name: str = "",
    ) -> Metadata:
        """
        Store a file and its metadata.

        Args:
            key: Unique identifier for the file
            file_stream: Async iterator of chunks, or an object with a
                (sync or async) read(size) method
            expiry: Requested lifetime, None or zero for no preference
            delete_key: Secret authorizing deletion
            access_key: Secret required to read the file, empty for public
            src_ip: Address of the uploader
            original_name: File name given by the uploader

        Returns:
            Metadata of the stored file

        Raises:
            InvalidDeleteKeyError: If delete_key is empty
            FileEmptyError: If the stream yields no bytes
            FileTooLargeError: If the file reaches the maximum size
            OSError: If writing the data or metadata fails
        """
        pass

    @abstractmethod
    async def put_metadata(self, key: str, metadata: Metadata) -> None:
        """
        Overwrite the metadata of a file. The data is left untouched.

        Args:
            key: Unique identifier for the file
            metadata: Replacement metadata
        """
        pass

    @abstractmethod
    async def serve_file(self, key: str) -> FileResponse:
        """
        Build a response streaming the file data.

        Range and conditional request handling belong to the response.

        Args:
            key: Unique identifier for the file

        Returns:
            Response serving the file data

        Raises:
            NotFoundError: If no metadata exists for the key
            BadMetadataError: If the metadata is unreadable or malformed
        """
        pass

    @abstractmethod
    async def size(self, key: str) -> int:
        """
        Return the size of the stored data, read from storage itself.

        Args:
            key: Unique identifier for the file

        Raises:
            NotFoundError: If no data exists for the key
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete the file data, then its metadata.

        Metadata is only removed once the data is gone.

        Args:
            key: Unique identifier for the file

        Raises:
            NotFoundError: If no data exists for the key
            OSError: If a removal fails
        """
        pass


class MetaStorageBackend(StorageBackend):
    """Storage backend that can also enumerate every stored key."""

    @abstractmethod
    async def list(self) -> list[str]:
        """
        List all stored keys.

        Returns:
            Keys of every file with stored data, in no particular order
        """
        pass
