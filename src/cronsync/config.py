"""Runtime settings loaded from the environment (``CRONSYNC_*``) or a ``.env`` file."""

import uuid
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CronSyncSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CRONSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    instance_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Identifier of this worker instance, written to the stats record of every run it executes",
    )
    redis_url: str = Field(default="redis://localhost:6379", description="Redis connection URL")
    lock_timeout: int = Field(
        default=300000, gt=0, description="Lock time-to-live in milliseconds"
    )
    key_prefix: str = Field(
        default="",
        description="Optional namespace put in front of the lock:<name> and stats:<name> keys",
    )
    log_level: str = Field(default="info", description="Log level name")
    log_file: Optional[str] = Field(default=None, description="Also write logs to this file")
    log_json: bool = Field(default=True, description="Emit JSON log lines instead of plain text")
    socket_timeout: float = Field(default=5.0, gt=0)
    socket_connect_timeout: float = Field(default=5.0, gt=0)

    @field_validator("log_level")
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("key_prefix")
    def strip_key_prefix(cls, v: str) -> str:
        return v.rstrip(":")
