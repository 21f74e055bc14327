from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    export_root: Path = Field(default=Path("content"), alias="CONTENTSYNC_EXPORT_ROOT")
    db_path: Path = Field(default=Path("data/contentsync.db"), alias="CONTENTSYNC_DB_PATH")

    # Order files/media by name before computing the combined digest.
    sorted_combined: bool = Field(default=False, alias="CONTENTSYNC_SORTED_COMBINED")

    log_level: str = Field(default="INFO", alias="CONTENTSYNC_LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
