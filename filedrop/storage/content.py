"""
Content inspection for uploaded files.

Detects the MIME type of a file from its first bytes and lists the entries
of archive uploads so they can be shown without extracting anything.
"""
import tarfile
import zipfile
from typing import BinaryIO

import magic

# Bytes handed to mimetype detection.
SNIFF_LENGTH = 512

DEFAULT_MIMETYPE = "application/octet-stream"

TAR_MIMETYPES = {
    "application/x-tar",
    "application/gzip",
    "application/x-gzip",
    "application/x-bzip2",
    "application/x-bzip",
    "application/x-xz",
}
ZIP_MIMETYPES = {
    "application/zip",
    "application/x-zip-compressed",
}
ARCHIVE_MIMETYPES = TAR_MIMETYPES | ZIP_MIMETYPES


def detect_mimetype(prefix: bytes) -> str:
    """
    Detect a MIME type from the leading bytes of a file.

    Args:
        prefix: Up to SNIFF_LENGTH bytes from the start of the file

    Returns:
        MIME type string, DEFAULT_MIMETYPE when libmagic has no answer
    """
    mimetype = magic.from_buffer(prefix[:SNIFF_LENGTH], mime=True)
    return mimetype or DEFAULT_MIMETYPE


def is_archive(mimetype: str) -> bool:
    return mimetype in ARCHIVE_MIMETYPES


def list_archive_files(mimetype: str, size: int, fileobj: BinaryIO) -> list[str]:
    """
    List the entry names of an archive.

    Tar archives (plain or gzip/bzip2/xz compressed) report regular files
    and directories; zip archives report every entry. Non-archive
    mimetypes yield an empty list.

    Args:
        mimetype: Detected MIME type of the file
        size: File size in bytes, an empty file is never an archive
        fileobj: Seekable binary file positioned anywhere

    Returns:
        Sorted list of entry names

    Raises:
        tarfile.TarError, zipfile.BadZipFile, OSError: If the archive is
            corrupt or unreadable
    """
    if size <= 0 or not is_archive(mimetype):
        return []

    fileobj.seek(0)
    if mimetype in ZIP_MIMETYPES:
        with zipfile.ZipFile(fileobj) as archive:
            files = archive.namelist()
    else:
        with tarfile.open(fileobj=fileobj, mode="r:*") as archive:
            files = [
                member.name
                for member in archive.getmembers()
                if member.isfile() or member.isdir()
            ]

    return sorted(files)
