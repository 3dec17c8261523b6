from dataclasses import dataclass
from datetime import timedelta

from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class StorageLimits:
    """Upload limits shared by every put. Read-only while the service runs."""

    max_size: int
    max_duration: timedelta
    max_duration_size: int


class Settings(BaseSettings):
    # Storage settings
    STORAGE_BACKEND: str = "local"  # local
    FILES_PATH: str = "files"
    META_PATH: str = "meta"

    # Limits
    MAX_SIZE: int = 4 * 1024 * 1024 * 1024  # uploads must be smaller than this
    MAX_DURATION_TIME: int = 0  # seconds, 0 = unlimited
    MAX_DURATION_SIZE: int = 4 * 1024 * 1024 * 1024  # files above this get MAX_DURATION_TIME

    # Logging
    LOG_LEVEL: str = "INFO"

    # "extra": "ignore" drops environment variables not declared above
    model_config = {"env_file": ".env", "extra": "ignore"}

    def storage_limits(self) -> StorageLimits:
        return StorageLimits(
            max_size=self.MAX_SIZE,
            max_duration=timedelta(seconds=self.MAX_DURATION_TIME),
            max_duration_size=self.MAX_DURATION_SIZE,
        )


settings = Settings()
