"""Log Types — severity, category, the immutable log record, and logger configuration.

Invariants:
    - LogLevel is totally ordered: DEBUG < INFO < WARN < ERROR < CRITICAL
    - LogEntry is frozen; its timestamp is the creation time, not the send time
    - LoggerConfig always satisfies max_buffer_size > 0 and flush_interval_ms >= 0
      (flush_interval_ms == 0 disables the flush timer)

Design Decisions:
    - IntEnum for LogLevel: threshold filtering is a plain comparison
    - str Enum for LogCategory: serializes to JSON without a custom encoder
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Severity levels, lowest first."""
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    CRITICAL = 4


def parse_level(value: "LogLevel | int | str") -> LogLevel:
    """Accept a LogLevel, its integer value, or its name ("warn", "ERROR")."""
    if isinstance(value, str):
        try:
            return LogLevel[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None
    return LogLevel(value)


class LogCategory(str, Enum):
    """Subsystem that produced the entry, independent of severity."""
    GENERAL = "general"
    API = "api"
    TRANSACTION = "transaction"
    NETWORK = "network"
    ERROR = "error"
    DEBUG = "debug"
    BRIDGE = "bridge"
    WALLET = "wallet"


@dataclass(frozen=True)
class LogEntry:
    """One buffered log event. Never mutated once created."""
    level: LogLevel
    category: LogCategory
    title: str
    message: str | None = None
    data: Any = None
    error: BaseException | None = None
    context: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """JSON shape used in the remote delivery payload."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "category": self.category.value,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "error": _error_to_dict(self.error),
            "context": self.context,
        }


def _error_to_dict(error: BaseException | None) -> dict[str, str] | None:
    if error is None:
        return None
    return {"type": type(error).__name__, "message": str(error)}


@dataclass(frozen=True)
class LoggerConfig:
    """Hot-swappable logger settings. Replace, never mutate: see with_changes()."""
    level: LogLevel = LogLevel.INFO
    enable_console: bool = True
    enable_remote: bool = False
    remote_endpoint: str | None = None
    max_buffer_size: int = 100
    flush_interval_ms: int = 5000

    def __post_init__(self):
        if self.max_buffer_size <= 0:
            raise ValueError(
                f"max_buffer_size must be > 0, got {self.max_buffer_size}",
            )
        if self.flush_interval_ms < 0:
            raise ValueError(
                f"flush_interval_ms must be >= 0, got {self.flush_interval_ms}",
            )

    def with_changes(self, **changes: Any) -> "LoggerConfig":
        """Partial update; unknown keys raise TypeError, invalid values ValueError."""
        if "level" in changes:
            changes["level"] = parse_level(changes["level"])
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.name,
            "enable_console": self.enable_console,
            "enable_remote": self.enable_remote,
            "remote_endpoint": self.remote_endpoint,
            "max_buffer_size": self.max_buffer_size,
            "flush_interval_ms": self.flush_interval_ms,
        }
