"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Settings are read once per process: get_settings() is cached (lru_cache)
    - environment resolves development > testnet > production, in that order
    - default_logger_config() always yields a valid LoggerConfig

Design Decisions:
    - NODE_ENV selects development/production, BRIDGE_ENV selects mainnet/testnet;
      the two axes stay separate because deployments set them independently
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from bridgex.core.log_types import LoggerConfig, LogLevel


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Environment selectors
    node_env: Literal["development", "production", "test"] = "production"
    bridge_env: Literal["mainnet", "testnet"] | None = None

    # Bridge API
    base_url: str = "https://bridgex-api.orbiter.finance/api/v1"
    default_host: str | None = None
    request_timeout_seconds: float = 30.0
    config_request_timeout_seconds: float = 5.0
    request_max_retries: int = 3
    request_base_delay_ms: int = 1000

    # Remote log collector
    log_endpoint: str | None = None

    # Process logging (stdlib)
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"

    @property
    def is_dev(self) -> bool:
        return self.node_env == "development"

    @property
    def is_testnet(self) -> bool:
        return self.bridge_env == "testnet"

    @property
    def is_mainnet(self) -> bool:
        return self.bridge_env == "mainnet"

    @property
    def environment(self) -> str:
        if self.is_dev:
            return "development"
        if self.is_testnet:
            return "testnet"
        return "production"


def default_logger_config(settings: Settings) -> LoggerConfig:
    """Per-environment logger defaults."""
    if settings.is_dev:
        return LoggerConfig(
            level=LogLevel.DEBUG,
            enable_console=True,
            enable_remote=False,
            max_buffer_size=100,
            flush_interval_ms=5000,
        )

    if settings.is_testnet:
        return LoggerConfig(
            level=LogLevel.INFO,
            enable_console=True,
            enable_remote=True,
            remote_endpoint=settings.log_endpoint or None,
            max_buffer_size=50,
            flush_interval_ms=10_000,
        )

    return LoggerConfig(
        level=LogLevel.WARN,
        enable_console=False,
        enable_remote=True,
        remote_endpoint=settings.log_endpoint or None,
        max_buffer_size=100,
        flush_interval_ms=30_000,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
