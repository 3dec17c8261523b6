"""
Local filesystem storage implementation.

This module provides a local filesystem implementation of the storage backend
with async file operations. Each file is stored as two entries with the same
name: the data under the files directory and a JSON metadata sidecar under
the meta directory.
"""
import asyncio
import hashlib
import inspect
import os
import uuid
from datetime import timedelta
from pathlib import Path
from typing import AsyncIterator, BinaryIO

import aiofiles
import aiofiles.os
from aiofiles.threadpool.binary import AsyncBufferedReader
from fastapi.responses import FileResponse

from filedrop.config import StorageLimits, settings
from filedrop.logging_config import setup_logging
from filedrop.storage.base import MetaStorageBackend
from filedrop.storage.content import (
    SNIFF_LENGTH,
    detect_mimetype,
    is_archive,
    list_archive_files,
)
from filedrop.storage.exceptions import (
    BadMetadataError,
    FileEmptyError,
    FileTooLargeError,
    InvalidDeleteKeyError,
    InvalidKeyError,
    NotFoundError,
)
from filedrop.storage.expiry import compute_expiry
from filedrop.storage.metadata import Metadata, MetadataJSON

logger = setup_logging()

CHUNK_SIZE = 64 * 1024  # 64KB


async def iter_chunks(
    file_stream: AsyncIterator[bytes] | BinaryIO,
    chunk_size: int = CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """
    Yield the non-empty chunks of an upload stream.

    Accepts async iterators (request bodies, async generators) as well as
    file-like objects whose read() is either sync (io.BytesIO, open files)
    or async (UploadFile).
    """
    if hasattr(file_stream, "__aiter__"):
        async for chunk in file_stream:
            if chunk:
                yield chunk
        return

    while True:
        chunk = file_stream.read(chunk_size)
        if inspect.isawaitable(chunk):
            chunk = await chunk
        if not chunk:
            break
        yield chunk


class LocalfsBackend(MetaStorageBackend):
    """
    Local filesystem storage with async operations.

    Layout:
        <files_path>/<key>  file data
        <meta_path>/<key>   metadata sidecar (JSON)

    The filesystem is the only source of truth: the backend keeps no
    caches, so instances may be shared between concurrent requests.
    """

    def __init__(
        self,
        meta_path: str | None = None,
        files_path: str | None = None,
        limits: StorageLimits | None = None,
    ):
        """
        Initialize local storage backend.

        Args:
            meta_path: Directory for metadata sidecars (default from config)
            files_path: Directory for file data (default from config)
            limits: Upload limits (default from config)
        """
        self.meta_path = Path(meta_path or settings.META_PATH)
        self.files_path = Path(files_path or settings.FILES_PATH)
        self.limits = limits or settings.storage_limits()

        self.meta_path.mkdir(parents=True, exist_ok=True)
        self.files_path.mkdir(parents=True, exist_ok=True)

    async def exists(self, key: str) -> bool:
        try:
            await aiofiles.os.stat(self._data_path(key))
        except FileNotFoundError:
            return False
        return True

    async def head(self, key: str) -> Metadata:
        meta_path = self._meta_path(key)

        try:
            async with aiofiles.open(meta_path, "rb") as f:
                raw = await f.read()
        except FileNotFoundError:
            raise NotFoundError(key) from None
        except OSError as e:
            logger.warning(f"Failed to open metadata for key={key}: {str(e)}")
            raise BadMetadataError(key, str(e)) from e

        try:
            return MetadataJSON.model_validate_json(raw).to_metadata()
        except (ValueError, OverflowError, OSError) as e:
            # pydantic's ValidationError is a ValueError; out of range expiry
            # timestamps raise OverflowError or OSError
            logger.warning(f"Malformed metadata for key={key}: {str(e)}")
            raise BadMetadataError(key, "malformed metadata") from e

    async def get(self, key: str) -> tuple[Metadata, AsyncBufferedReader]:
        """
        Return metadata and an open data stream positioned at offset 0.

        The caller owns the stream and must close it:

            metadata, stream = await storage.get(key)
            try:
                data = await stream.read()
            finally:
                await stream.close()
        """
        metadata = await self.head(key)
        stream = await aiofiles.open(self._data_path(key), "rb")
        return metadata, stream

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
        Stream a file to disk and record its metadata.

        The data is hashed while it is written, so the upload is read
        exactly once and only one chunk is held in memory. The data file
        is removed again if anything fails before the metadata has been
        written.

        Raises:
            InvalidKeyError: If the key is not a plain file name
            InvalidDeleteKeyError: If delete_key is empty
            FileEmptyError: If the stream yields no bytes
            FileTooLargeError: If the upload reaches limits.max_size
            OSError: If writing the data or metadata fails
        """
        if not delete_key:
            raise InvalidDeleteKeyError()
        file_path = self._data_path(key)
        hasher = hashlib.sha256()
        total_size = 0

        try:
            async with aiofiles.open(file_path, "w+b") as dst:
                async for chunk in iter_chunks(file_stream):
                    total_size += len(chunk)
                    if total_size >= self.limits.max_size:
                        raise FileTooLargeError(self.limits.max_size)
                    hasher.update(chunk)
                    await dst.write(chunk)

                if total_size == 0:
                    raise FileEmptyError()

                # First bytes for mimetype detection
                await dst.seek(0)
                header = await dst.read(SNIFF_LENGTH)

            mimetype = detect_mimetype(header)
            archive_files = []
            if is_archive(mimetype):
                archive_files = await self._list_archive(key, file_path, mimetype, total_size)

            metadata = Metadata(
                delete_key=delete_key,
                access_key=access_key,
                sha256sum=hasher.hexdigest(),
                mimetype=mimetype,
                size=total_size,
                expiry=compute_expiry(
                    expiry,
                    total_size,
                    self.limits.max_duration,
                    self.limits.max_duration_size,
                ),
                src_ip=src_ip,
                original_name=original_name,
                archive_files=archive_files,
            )
            await self._write_metadata(key, metadata)

        except (FileEmptyError, FileTooLargeError) as e:
            logger.info(f"Rejected upload key={key}: {str(e)}")
            await self._discard(file_path)
            raise
        except BaseException:
            logger.error(f"Failed to store file key={key}", exc_info=True)
            await self._discard(file_path)
            raise

        logger.info(
            f"Stored file key={key}, size={metadata.size}, "
            f"mimetype={metadata.mimetype}, expiry={metadata.expiry.isoformat()}"
        )
        return metadata

    async def put_metadata(self, key: str, metadata: Metadata) -> None:
        await self._write_metadata(key, metadata)

    async def serve_file(self, key: str) -> FileResponse:
        """
        Return a response streaming the file data.

        FileResponse takes care of range, conditional and
        content-length handling when the response is sent.
        """
        metadata = await self.head(key)
        return FileResponse(path=self._data_path(key), media_type=metadata.mimetype)

    async def size(self, key: str) -> int:
        try:
            stat = await aiofiles.os.stat(self._data_path(key))
        except FileNotFoundError:
            raise NotFoundError(key) from None
        return stat.st_size

    async def delete(self, key: str) -> None:
        # Metadata is only removed once the data is gone
        try:
            await aiofiles.os.remove(self._data_path(key))
        except FileNotFoundError:
            raise NotFoundError(key) from None

        await aiofiles.os.remove(self._meta_path(key))
        logger.info(f"Deleted file key={key}")

    def _data_path(self, key: str) -> Path:
        return self.files_path / self._validate_key(key)

    def _meta_path(self, key: str) -> Path:
        return self.meta_path / self._validate_key(key)

    def _validate_key(self, key: str) -> str:
        """
        Ensure the key maps to a single entry inside the storage directories.

        Raises:
            InvalidKeyError: If the key is empty, a relative path component,
                or contains a path separator or NUL
        """
        separators = [sep for sep in (os.sep, os.altsep, "/") if sep]
        if (
            not key
            or key in (".", "..")
            or "\x00" in key
            or any(sep in key for sep in separators)
        ):
            raise InvalidKeyError(key)
        return key

    async def _write_metadata(self, key: str, metadata: Metadata) -> None:
        """
        Write the metadata sidecar.

        The JSON is written to a temporary file next to the sidecar and
        renamed into place, so readers never see a partial record.
        """
        meta_path = self._meta_path(key)
        tmp_path = meta_path.with_name(f".{key}.{uuid.uuid4().hex}.tmp")
        payload = MetadataJSON.from_metadata(metadata).dumps()

        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as dst:
                await dst.write(payload + "\n")
            await aiofiles.os.replace(tmp_path, meta_path)
        except BaseException:
            await self._discard(tmp_path)
            raise

    async def _list_archive(
        self, key: str, file_path: Path, mimetype: str, size: int
    ) -> list[str]:
        """List archive entries, returning an empty list on any failure."""

        def read_entries() -> list[str]:
            with open(file_path, "rb") as f:
                return list_archive_files(mimetype, size, f)

        try:
            return await asyncio.to_thread(read_entries)
        except Exception as e:
            # Archive listing is best-effort and never fails the upload
            logger.debug(f"Could not list archive files for key={key}: {str(e)}")
            return []

    async def _discard(self, path: Path) -> None:
        """Remove a partially written file, logging any failure."""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to clean up {path}: {str(e)}")

    async def list(self) -> list[str]:
        """
        List keys with stored data.

        Only the files directory is read: a key whose data exists is listed
        even when its metadata is missing.
        """
        return await aiofiles.os.listdir(self.files_path)
