"""Settings — tests for environment resolution and per-environment logger defaults."""

from bridgex.config import Settings, default_logger_config, get_settings
from bridgex.core.log_types import LogLevel


def test_defaults_to_production():
    settings = Settings()
    assert settings.environment == "production"
    assert settings.base_url == "https://bridgex-api.orbiter.finance/api/v1"


def test_development_wins_over_testnet():
    settings = Settings(node_env="development", bridge_env="testnet")
    assert settings.is_dev and settings.is_testnet
    assert settings.environment == "development"


def test_testnet_environment():
    assert Settings(bridge_env="testnet").environment == "testnet"


def test_mainnet_is_production():
    settings = Settings(bridge_env="mainnet")
    assert settings.is_mainnet
    assert settings.environment == "production"


def test_reads_environment_variables(monkeypatch):
    monkeypatch.setenv("NODE_ENV", "development")
    monkeypatch.setenv("LOG_ENDPOINT", "https://logs.example/ingest")
    monkeypatch.setenv("REQUEST_MAX_RETRIES", "5")
    settings = get_settings()
    assert settings.is_dev
    assert settings.log_endpoint == "https://logs.example/ingest"
    assert settings.request_max_retries == 5
    assert get_settings() is settings


def test_development_logger_defaults():
    config = default_logger_config(Settings(node_env="development"))
    assert config.level == LogLevel.DEBUG
    assert config.enable_console is True
    assert config.enable_remote is False
    assert config.max_buffer_size == 100
    assert config.flush_interval_ms == 5000


def test_testnet_logger_defaults():
    config = default_logger_config(
        Settings(bridge_env="testnet", log_endpoint="https://logs.example/ingest"),
    )
    assert config.level == LogLevel.INFO
    assert config.enable_console is True
    assert config.enable_remote is True
    assert config.remote_endpoint == "https://logs.example/ingest"
    assert config.max_buffer_size == 50
    assert config.flush_interval_ms == 10_000


def test_production_logger_defaults():
    config = default_logger_config(Settings())
    assert config.level == LogLevel.WARN
    assert config.enable_console is False
    assert config.enable_remote is True
    assert config.remote_endpoint is None
    assert config.max_buffer_size == 100
    assert config.flush_interval_ms == 30_000


def test_empty_endpoint_treated_as_missing():
    config = default_logger_config(Settings(bridge_env="testnet", log_endpoint=""))
    assert config.remote_endpoint is None
