from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    app_name: str = Field(default="AffinityPlacement")
    app_env: str = Field(default="dev")
    app_version: str = Field(default="0.1.0")

    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    # JSON or YAML document installed into the store at startup.
    placement_config_file: Optional[str] = Field(default=None)

    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=8020)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {value!r}.")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
