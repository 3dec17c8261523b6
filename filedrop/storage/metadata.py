"""
Metadata describing a stored file, and its on-disk sidecar representation.

Metadata is the backend-agnostic value handed to callers. MetadataJSON is
the persisted contract: field names and the omission of empty optional
fields must stay stable so that existing sidecars remain readable.
"""
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from filedrop.utils.datetime import ensure_aware, from_unix, to_unix


@dataclass
class Metadata:
    """Descriptive fields of one stored file. The key is held by the backend."""

    delete_key: str
    sha256sum: str
    mimetype: str
    size: int
    expiry: datetime
    access_key: str = ""
    src_ip: str = ""
    original_name: str = ""
    archive_files: list[str] = field(default_factory=list)

    def __post_init__(self):
        # The sidecar keeps whole seconds
        self.expiry = ensure_aware(self.expiry).replace(microsecond=0)


class MetadataJSON(BaseModel):
    """
    Sidecar schema.

    Optional fields default to empty values and are left out when
    serialized, so records written before a field existed still parse.
    """

    delete_key: str
    access_key: str = ""
    sha256sum: str
    mimetype: str
    size: int
    expiry: int
    srcip: str = ""
    original_name: str = ""
    archive_files: list[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_metadata(cls, metadata: Metadata) -> "MetadataJSON":
        return cls(
            delete_key=metadata.delete_key,
            access_key=metadata.access_key,
            sha256sum=metadata.sha256sum,
            mimetype=metadata.mimetype,
            size=metadata.size,
            expiry=to_unix(metadata.expiry),
            srcip=metadata.src_ip,
            original_name=metadata.original_name,
            archive_files=list(metadata.archive_files),
        )

    def to_metadata(self) -> Metadata:
        return Metadata(
            delete_key=self.delete_key,
            access_key=self.access_key,
            sha256sum=self.sha256sum,
            mimetype=self.mimetype,
            size=self.size,
            expiry=from_unix(self.expiry),
            src_ip=self.srcip,
            original_name=self.original_name,
            archive_files=list(self.archive_files),
        )

    def dumps(self) -> str:
        empty = {name for name in OMIT_IF_EMPTY if not getattr(self, name)}
        return self.model_dump_json(exclude=empty)


OMIT_IF_EMPTY = ("access_key", "srcip", "original_name", "archive_files")
