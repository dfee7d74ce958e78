"""Structured Logger — leveled, categorized events, buffered and shipped to a remote collector.

Invariants:
    - A log call never raises and never awaits delivery
    - Level filtering reads the live config on every call (no snapshot)
    - Entries are buffered only while remote delivery is enabled and the logger is READY
    - An entry is a snapshot: data and context are deep-copied when log() is called
    - Appending the max_buffer_size-th entry swaps the buffer before log() returns
    - A failed delivery re-queues its batch in front of newer entries (order kept, no duplicates)
    - The buffer never holds more than max_buffer_size * MAX_PENDING_BATCHES entries;
      the oldest are dropped first, with a console warning
    - Delivery failures are reported to the console (stdlib logging) only
    - One process-wide instance via get_logger(); destroy() is terminal

Design Decisions:
    - Buffer append/swap under a threading.Lock: log() may be called from worker threads
    - A full buffer is shipped wherever log() was called from: a task on the running loop,
      a call_soon_threadsafe hand-off to the logger's loop from worker threads, or a
      synchronous httpx.Client post on a daemon thread when no loop is running at all
    - The flush timer only runs on an event loop; sync hosts rely on the size trigger
    - Console output goes through stdlib logging so setup_logging() controls its format
"""

import asyncio
import contextlib
import copy
import json
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx

from bridgex.config import default_logger_config, get_settings
from bridgex.core.log_types import LogCategory, LogEntry, LoggerConfig, LogLevel

logger = logging.getLogger(__name__)
console = logging.getLogger("bridgex.console")

_CONSOLE_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}

DELIVERY_TIMEOUT_SECONDS = 10.0
MAX_PENDING_BATCHES = 10


def _snapshot(value: Any) -> Any:
    """Deep copy of caller-owned data; repr() when the object cannot be copied."""
    if value is None:
        return None
    try:
        return copy.deepcopy(value)
    except Exception:
        return repr(value)


class LoggerState(str, Enum):
    """Lifecycle of the process-wide logger."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DESTROYED = "destroyed"


class StructuredLogger:
    """Buffers LogEntry records and flushes them to a remote endpoint."""

    def __init__(
        self,
        config: LoggerConfig,
        environment: str = "production",
        http_client: httpx.AsyncClient | None = None,
        sync_http_client: httpx.Client | None = None,
    ):
        self._state = LoggerState.INITIALIZING
        self._config = config
        self._environment = environment
        self._buffer: list[LogEntry] = []
        self._lock = threading.Lock()
        self._http = http_client
        self._owns_http = http_client is None
        self._sync_http = sync_http_client
        self._owns_sync_http = sync_http_client is None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._flush_task: asyncio.Task | None = None
        self._deliveries: set[asyncio.Task] = set()
        self._threads: set[threading.Thread] = set()
        with contextlib.suppress(RuntimeError):
            self._loop = asyncio.get_running_loop()
        self._state = LoggerState.READY
        self._ensure_timer()

    # ─── Introspection ──────────────────────────────────────────

    @property
    def state(self) -> LoggerState:
        return self._state

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._buffer)

    def pending_entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._buffer)

    def get_config(self) -> LoggerConfig:
        return self._config

    # ─── Primary entry point ────────────────────────────────────

    def log(
        self,
        level: LogLevel,
        category: LogCategory,
        title: str,
        message: str | None = None,
        data: Any = None,
        error: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Record one event. Filtered, echoed to console, buffered for remote delivery."""
        try:
            self._log(level, category, title, message, data, error, context)
        except Exception as e:
            logger.error(f"Structured log call failed: {e}", exc_info=True)

    def _log(self, level, category, title, message, data, error, context) -> None:
        config = self._config
        level = LogLevel(level)
        if level < config.level:
            return

        if message is None and error is not None:
            message = str(error)
        entry = LogEntry(
            level=level,
            category=LogCategory(category),
            title=title,
            message=message,
            data=_snapshot(data),
            error=error,
            context={k: _snapshot(v) for k, v in context.items()} if context else None,
        )

        if config.enable_console:
            self._write_console(entry)

        if config.enable_remote and self._state is LoggerState.READY:
            self._ensure_timer()
            self._append(entry)

    # ─── Leveled shorthands ─────────────────────────────────────

    def debug(self, category: LogCategory, title: str, data: Any = None,
              context: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.DEBUG, category, title, data=data, context=context)

    def info(self, category: LogCategory, title: str, data: Any = None,
             context: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.INFO, category, title, data=data, context=context)

    def warn(self, category: LogCategory, title: str, data: Any = None,
             context: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.WARN, category, title, data=data, context=context)

    def error(self, category: LogCategory, title: str, error: BaseException | None = None,
              data: Any = None, context: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.ERROR, category, title, error=error, data=data, context=context)

    def critical(self, category: LogCategory, title: str, error: BaseException | None = None,
                 data: Any = None, context: dict[str, Any] | None = None) -> None:
        self.log(LogLevel.CRITICAL, category, title, error=error, data=data, context=context)

    # ─── Backward-compatible aliases ────────────────────────────

    def log_general(self, title: str, *args: Any) -> None:
        self.log(LogLevel.INFO, LogCategory.GENERAL, title, data=list(args) if args else None)

    def log_tx(self, *args: Any) -> None:
        self.log(LogLevel.INFO, LogCategory.TRANSACTION, "Transaction", data=list(args))

    def log_net(self, *args: Any) -> None:
        self.log(LogLevel.INFO, LogCategory.NETWORK, "Network", data=list(args))

    def log_error(self, title: str, error: Any) -> None:
        if not isinstance(error, BaseException):
            error = Exception(str(error))
        self.log(LogLevel.ERROR, LogCategory.ERROR, title, error=error)

    # ─── Configuration ──────────────────────────────────────────

    def update_config(self, config: LoggerConfig | None = None, **changes: Any) -> None:
        """Swap in a new config; partial changes apply on top of the current one.

        Raises ValueError/TypeError on invalid changes (the current config is kept).
        """
        previous = self._config
        self._config = (config or previous).with_changes(**changes)

        timer_shape = (self._config.enable_remote, self._config.flush_interval_ms)
        if timer_shape != (previous.enable_remote, previous.flush_interval_ms):
            self._cancel_timer()
            self._ensure_timer()

        self.info(LogCategory.GENERAL, "Logger config updated", self._config.to_dict())

    # ─── Buffer and delivery ────────────────────────────────────

    def _append(self, entry: LogEntry) -> None:
        with self._lock:
            self._buffer.append(entry)
            full = len(self._buffer) >= self._config.max_buffer_size
        if full:
            self._trigger_flush()

    def _take_batch(self) -> list[LogEntry]:
        with self._lock:
            batch, self._buffer = self._buffer, []
        return batch

    def _requeue(self, batch: list[LogEntry]) -> None:
        limit = self._config.max_buffer_size * MAX_PENDING_BATCHES
        with self._lock:
            self._buffer[:0] = batch
            dropped = len(self._buffer) - limit
            if dropped > 0:
                del self._buffer[:dropped]
        if dropped > 0:
            logger.warning(
                f"Log buffer over {limit} entries, dropped {dropped} oldest",
                extra={"dropped": dropped},
            )

    def _trigger_flush(self) -> None:
        """Swap now, deliver in the background on whatever can run the delivery."""
        batch = self._take_batch()
        if not batch:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._loop = loop
            self._spawn_delivery(batch)
            return

        owner = self._loop
        if owner is not None and owner.is_running():
            try:
                owner.call_soon_threadsafe(self._spawn_delivery, batch)
                return
            except RuntimeError:  # loop closed since the check
                pass
        self._deliver_in_thread(batch)

    def _spawn_delivery(self, batch: list[LogEntry]) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(batch))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)

    async def flush(self) -> None:
        """Deliver everything buffered so far as one request."""
        if not self._config.enable_remote:
            return
        batch = self._take_batch()
        if not batch:
            return
        await self._deliver(batch)

    async def drain(self) -> None:
        """Wait for background deliveries started by buffer-full triggers."""
        loop = asyncio.get_running_loop()
        while True:
            pending = [t for t in self._deliveries if t.get_loop() is loop]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        if self._threads:
            await asyncio.to_thread(self.join_threads)

    def join_threads(self, timeout: float | None = None) -> None:
        """Block until deliveries started outside any event loop have finished."""
        while True:
            with self._lock:
                threads = list(self._threads)
            if not threads:
                return
            for thread in threads:
                thread.join(timeout)
            if timeout is not None:
                return

    def _endpoint(self, batch: list[LogEntry]) -> str | None:
        endpoint = self._config.remote_endpoint
        if not endpoint:
            logger.warning(
                f"Remote logging enabled without an endpoint, dropped {len(batch)} entries",
            )
            return None
        return endpoint

    def _encode(self, batch: list[LogEntry]) -> str:
        payload = {
            "logs": [entry.to_dict() for entry in batch],
            "environment": self._environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return json.dumps(payload, ensure_ascii=False, default=str)

    async def _deliver(self, batch: list[LogEntry]) -> None:
        endpoint = self._endpoint(batch)
        if endpoint is None:
            return
        try:
            response = await self._client().post(
                endpoint,
                content=self._encode(batch),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except asyncio.CancelledError:
            self._requeue(batch)
            raise
        except Exception as e:
            logger.error(f"Failed to send logs to remote endpoint: {e}")
            self._requeue(batch)
            return

        logger.debug(f"Delivered {len(batch)} log entries to {endpoint}")

    def _deliver_in_thread(self, batch: list[LogEntry]) -> None:
        thread = threading.Thread(
            target=self._deliver_sync, args=(batch,),
            name="bridgex-log-delivery", daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _deliver_sync(self, batch: list[LogEntry]) -> None:
        """Thread target: same contract as _deliver, over a blocking client."""
        try:
            endpoint = self._endpoint(batch)
            if endpoint is None:
                return
            try:
                response = self._sync_client().post(
                    endpoint,
                    content=self._encode(batch),
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
            except Exception as e:
                logger.error(f"Failed to send logs to remote endpoint: {e}")
                self._requeue(batch)
                return
            logger.debug(f"Delivered {len(batch)} log entries to {endpoint}")
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=DELIVERY_TIMEOUT_SECONDS)
        return self._http

    def _sync_client(self) -> httpx.Client:
        with self._lock:
            if self._sync_http is None:
                self._sync_http = httpx.Client(timeout=DELIVERY_TIMEOUT_SECONDS)
            return self._sync_http

    # ─── Flush timer ────────────────────────────────────────────

    def _ensure_timer(self) -> None:
        config = self._config
        if self._state is not LoggerState.READY:
            return
        if not config.enable_remote or config.flush_interval_ms <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = self._flush_task
        if task is not None and not task.done() and task.get_loop() is loop:
            return
        self._loop = loop
        self._flush_task = loop.create_task(self._flush_loop())

    async def _flush_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.flush_interval_ms / 1000)
            await self.flush()

    def _cancel_timer(self) -> asyncio.Task | None:
        task, self._flush_task = self._flush_task, None
        if task is None or task.done() or task.get_loop().is_closed():
            return None
        task.cancel()
        return task

    # ─── Teardown ───────────────────────────────────────────────

    async def destroy(self) -> None:
        """Stop the timer, flush once more, wait for in-flight deliveries, release the HTTP clients."""
        if self._state is LoggerState.DESTROYED:
            return
        self._state = LoggerState.DESTROYED

        task = self._cancel_timer()
        if task is not None and task.get_loop() is asyncio.get_running_loop():
            with contextlib.suppress(asyncio.CancelledError):
                await task

        await self.flush()
        await self.drain()
        if self.pending_count:
            logger.warning(f"Logger destroyed with {self.pending_count} undelivered entries")

        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None
        if self._owns_sync_http and self._sync_http is not None:
            self._sync_http.close()
            self._sync_http = None

    # ─── Console ────────────────────────────────────────────────

    def _write_console(self, entry: LogEntry) -> None:
        text = f"[{entry.level.name}][{entry.category.value}] {entry.title}"
        if entry.message:
            text = f"{text}: {entry.message}"
        if entry.data is not None:
            text = f"{text} {entry.data!r}"
        console.log(
            _CONSOLE_LEVELS[entry.level],
            text,
            exc_info=entry.error,
            extra={"category": entry.category.value, "title": entry.title},
        )


# Singleton (created on first use)
_instance: StructuredLogger | None = None
_instance_lock = threading.Lock()


def get_logger() -> StructuredLogger:
    """Process-wide logger, built from environment settings on first call."""
    global _instance
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                settings = get_settings()
                config = default_logger_config(settings)
                _instance = StructuredLogger(config, environment=settings.environment)
                _instance.info(LogCategory.GENERAL, "Logger initialized", {
                    "level": config.level.name,
                    "environment": settings.environment,
                    "enable_console": config.enable_console,
                    "enable_remote": config.enable_remote,
                })
    return _instance


def log(title: str, *args: Any) -> None:
    get_logger().log_general(title, *args)


def log_tx(*args: Any) -> None:
    get_logger().log_tx(*args)


def log_net(*args: Any) -> None:
    get_logger().log_net(*args)


def log_error(title: str, error: Any) -> None:
    get_logger().log_error(title, error)
