import io
import tarfile
import zipfile
from datetime import timedelta

import pytest

from filedrop.config import StorageLimits
from filedrop.storage.local import LocalfsBackend


@pytest.fixture
def limits():
    """Small limits so size and lifetime rules are easy to reach."""
    return StorageLimits(
        max_size=64 * 1024,
        max_duration=timedelta(hours=1),
        max_duration_size=1000,
    )


@pytest.fixture
def storage(tmp_path, limits):
    """Create a storage backend with temporary directories."""
    return LocalfsBackend(
        meta_path=str(tmp_path / "meta"),
        files_path=str(tmp_path / "files"),
        limits=limits,
    )


@pytest.fixture
def zip_bytes():
    """A zip archive containing two files."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("docs/readme.txt", "read me")
        archive.writestr("b.txt", "bbb")
    return buffer.getvalue()


@pytest.fixture
def tar_gz_bytes():
    """A gzip compressed tar archive containing a directory and two files."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        directory = tarfile.TarInfo("data")
        directory.type = tarfile.DIRTYPE
        archive.addfile(directory)
        for name, content in (("data/one.csv", b"1,2,3\n"), ("zeta.txt", b"z\n")):
            info = tarfile.TarInfo(name)
            info.size = len(content)
            archive.addfile(info, io.BytesIO(content))
    return buffer.getvalue()
