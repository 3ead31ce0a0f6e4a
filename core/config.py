"""
Pydantic-based configuration for scanner defaults.

Every knob can be overridden through environment variables prefixed with
PORTSWEEP_ (or a local .env file) so the CLI and the API share one set of
defaults without code changes.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, env_file=".env", env_prefix="PORTSWEEP_")

    # Scan defaults (used when the caller does not say otherwise)
    default_target: str = Field("scanme.nmap.org", description="target scanned when none is given")
    default_start_port: int = Field(1, description="first port of the default range")
    default_end_port: int = Field(1024, description="last port of the default range")
    default_workers: int = Field(100, description="concurrent connection workers")
    default_timeout: int = Field(5, description="connect and banner-read timeout in seconds")

    # Engine tuning
    banner_read_size: int = Field(1024, description="max bytes read from an open port")
    queue_factor: int = Field(2, description="channel capacity as a multiple of worker count")

    # API admission control
    api_max_workers: int = Field(500, description="largest worker count accepted over HTTP")

    # Logging
    log_level: str = Field("WARNING", description="root log level for the CLI")

    @field_validator("banner_read_size", "queue_factor", "api_max_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
