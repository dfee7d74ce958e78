"""Log Types — tests for level ordering, entry immutability, and config validation.

Tests cover:
    - LogLevel ordering and parse_level
    - LogEntry is frozen, timestamped at creation, serializes to the remote shape
    - LoggerConfig rejects max_buffer_size <= 0 and flush_interval_ms < 0
    - with_changes() is a partial update returning a new config
"""

import dataclasses
from datetime import datetime, timezone

import pytest

from bridgex.core.log_types import (
    LogCategory,
    LogEntry,
    LoggerConfig,
    LogLevel,
    parse_level,
)


def test_levels_are_ordered():
    assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARN < LogLevel.ERROR < LogLevel.CRITICAL


@pytest.mark.parametrize("raw, expected", [
    ("warn", LogLevel.WARN),
    (" ERROR ", LogLevel.ERROR),
    (0, LogLevel.DEBUG),
    (LogLevel.CRITICAL, LogLevel.CRITICAL),
])
def test_parse_level(raw, expected):
    assert parse_level(raw) == expected


def test_parse_level_rejects_unknown_name():
    with pytest.raises(ValueError):
        parse_level("verbose")


def test_entry_is_frozen():
    entry = LogEntry(LogLevel.INFO, LogCategory.BRIDGE, "Quote fetched")
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.title = "changed"


def test_entry_timestamp_is_creation_time():
    before = datetime.now(timezone.utc)
    entry = LogEntry(LogLevel.INFO, LogCategory.GENERAL, "t")
    after = datetime.now(timezone.utc)
    assert before <= entry.timestamp <= after


def test_entry_to_dict():
    entry = LogEntry(
        LogLevel.ERROR, LogCategory.WALLET, "Sign failed",
        message="user rejected", data={"chain_id": 1},
        error=RuntimeError("user rejected"), context={"address": "0x456"},
    )
    d = entry.to_dict()
    assert d["level"] == "ERROR"
    assert d["category"] == "wallet"
    assert d["title"] == "Sign failed"
    assert d["message"] == "user rejected"
    assert d["data"] == {"chain_id": 1}
    assert d["error"] == {"type": "RuntimeError", "message": "user rejected"}
    assert d["context"] == {"address": "0x456"}
    assert d["timestamp"].endswith("+00:00")


def test_entry_to_dict_without_error():
    assert LogEntry(LogLevel.INFO, LogCategory.API, "ok").to_dict()["error"] is None


@pytest.mark.parametrize("field, value", [
    ("max_buffer_size", 0),
    ("max_buffer_size", -5),
    ("flush_interval_ms", -1),
])
def test_config_rejects_invalid_values(field, value):
    with pytest.raises(ValueError):
        LoggerConfig(**{field: value})


def test_config_zero_interval_allowed():
    assert LoggerConfig(flush_interval_ms=0).flush_interval_ms == 0


def test_with_changes_is_partial():
    base = LoggerConfig(level=LogLevel.INFO, max_buffer_size=50)
    changed = base.with_changes(level="debug", enable_console=False)
    assert changed.level == LogLevel.DEBUG
    assert changed.enable_console is False
    assert changed.max_buffer_size == 50
    assert base.level == LogLevel.INFO


def test_with_changes_validates():
    with pytest.raises(ValueError):
        LoggerConfig().with_changes(max_buffer_size=0)


def test_with_changes_rejects_unknown_field():
    with pytest.raises(TypeError):
        LoggerConfig().with_changes(buffer=10)
