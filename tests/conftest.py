"""Root conftest — environment isolation and shared fakes.

Invariants:
    - Every test starts with no logger singleton, no default error handler, fresh settings
    - Environment selectors from the host shell never leak into tests
"""

import json
import threading

import httpx
import pytest

from bridgex.config import get_settings
from bridgex.core.log_types import LoggerConfig, LogLevel
from bridgex.infrastructure import structured_logger as structured_logger_module
from bridgex.infrastructure.structured_logger import StructuredLogger
from bridgex.services import error_handler as error_handler_module

_ENV_VARS = (
    "NODE_ENV", "BRIDGE_ENV", "LOG_ENDPOINT", "BASE_URL", "DEFAULT_HOST",
    "REQUEST_MAX_RETRIES", "REQUEST_BASE_DELAY_MS", "LOG_LEVEL", "LOG_FORMAT",
)

LOG_ENDPOINT = "https://logs.test/ingest"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)  # no stray .env file
    get_settings.cache_clear()
    monkeypatch.setattr(structured_logger_module, "_instance", None)
    monkeypatch.setattr(error_handler_module, "_default_handler", None)
    yield
    get_settings.cache_clear()


class RecordingReporter:
    """Stands in for ErrorHandler: remembers every terminal failure."""

    def __init__(self):
        self.errors = []

    def handle(self, error):
        self.errors.append(error)


@pytest.fixture
def reporter():
    return RecordingReporter()


class LogCollector:
    """MockTransport handler acting as the remote log collector."""

    def __init__(self):
        self.batches: list[dict] = []
        self.threads: list[str] = []
        self.fail_next = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.fail_next:
            self.fail_next -= 1
            return httpx.Response(503, json={"error": "collector unavailable"})
        self.batches.append(json.loads(request.content))
        self.threads.append(threading.current_thread().name)
        return httpx.Response(200, json={"ok": True})

    def titles(self, index: int = -1) -> list[str]:
        return [entry["title"] for entry in self.batches[index]["logs"]]


@pytest.fixture
def collector():
    return LogCollector()


@pytest.fixture
def make_logger(collector):
    """Build a StructuredLogger shipping to `collector`; timer off unless overridden."""

    def _make(**overrides) -> StructuredLogger:
        config = LoggerConfig(
            level=LogLevel.DEBUG,
            enable_console=False,
            enable_remote=True,
            remote_endpoint=LOG_ENDPOINT,
            max_buffer_size=100,
            flush_interval_ms=0,
        ).with_changes(**overrides)
        http = httpx.AsyncClient(transport=httpx.MockTransport(collector))
        sync_http = httpx.Client(transport=httpx.MockTransport(collector))
        return StructuredLogger(
            config, environment="testnet", http_client=http, sync_http_client=sync_http,
        )

    return _make
