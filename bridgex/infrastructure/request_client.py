"""Resilient Request Client — wraps httpx.AsyncClient with retry, backoff, and failure classification.

Invariants:
    - Transient failures (no response, timeout, 5xx): retried up to max_retries,
      delay before retry k is base_delay_ms * 2**(k-1)
    - Client errors (4xx, undecodable body, unbuildable request) and business errors:
      immediate failure, no retry
    - A body with an integer `code` other than 0 is a BusinessError even on HTTP 200
    - Attempt counting is local to each send() call
    - Every terminal failure reaches the error reporter exactly once; retries never do

Design Decisions:
    - RetryPolicy + ResponseClassifier passed per client: two clients, two policies, no globals
    - Interceptors are httpx event_hooks owned by the client; nothing global is patched
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

import httpx

from bridgex.core.error_codes import OK_CODE, ErrorCode
from bridgex.core.errors import (
    BridgeError,
    BusinessError,
    ClientError,
    ErrorContext,
    RequestTimeoutError,
    ServerError,
    TransportError,
)

logger = logging.getLogger(__name__)

EventHook = Callable[[Any], Awaitable[None]]


class ErrorReporter(Protocol):
    """Receives terminal failures (see services/error_handler.py)."""
    def handle(self, error: BaseException) -> Any: ...


def is_retryable(error: BridgeError) -> bool:
    """No response, 5xx, or a timeout. Business and client errors never qualify."""
    if isinstance(error, (BusinessError, ClientError)):
        return False
    return (
        error.status_code is None
        or error.status_code >= 500
        or error.is_timeout
        or "timeout" in error.message.lower()
    )


@dataclass(frozen=True)
class RetryPolicy:
    """Per-client retry configuration."""
    max_retries: int = 3
    base_delay_ms: int = 1000
    retry_condition: Callable[[BridgeError], bool] = is_retryable

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got {self.base_delay_ms}")

    def delay_ms(self, attempt_index: int) -> int:
        """Backoff before resubmitting after failed attempt `attempt_index` (0-based)."""
        return self.base_delay_ms * (2 ** attempt_index)

    def should_retry(self, error: BridgeError, attempt_index: int) -> bool:
        return attempt_index < self.max_retries and self.retry_condition(error)


class ResponseClassifier:
    """Turns an httpx.Response into a decoded payload or a BridgeError."""

    def classify(self, response: httpx.Response, context: ErrorContext) -> Any:
        status = response.status_code
        if status >= 500:
            raise ServerError(status, _error_text(response), context=context)
        if status >= 400:
            raise ClientError(
                _error_text(response) or f"Request rejected with {status}",
                status_code=status, context=context,
            )

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError:
            raise ClientError(
                "Response body is not valid JSON",
                status_code=status, code=ErrorCode.INVALID_RESPONSE, context=context,
            )

        if isinstance(payload, dict):
            code = payload.get("code")
            if isinstance(code, int) and not isinstance(code, bool) and code != OK_CODE:
                raise BusinessError(code, payload.get("message"), context=context)
        return payload


def _error_text(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


class ResilientRequestClient:
    """Issues requests with retry on transient failures and uniform error reporting."""

    def __init__(
        self,
        *,
        error_reporter: ErrorReporter,
        base_url: str = "",
        timeout_seconds: float = 30.0,
        retry_policy: RetryPolicy | None = None,
        classifier: ResponseClassifier | None = None,
        request_hooks: list[EventHook] | None = None,
        response_hooks: list[EventHook] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        name: str = "default",
    ):
        self.name = name
        self.retry_policy = retry_policy or RetryPolicy()
        self.classifier = classifier or ResponseClassifier()
        self._reporter = error_reporter
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Content-Type": "application/json"},
            event_hooks={
                "request": list(request_hooks or []),
                "response": list(response_hooks or []),
            },
            transport=transport,
        )

    async def __aenter__(self) -> "ResilientRequestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get(self, url: str, **kwargs) -> Any:
        return await self.send("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> Any:
        return await self.send("POST", url, **kwargs)

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send with retry. Returns the decoded body; raises BridgeError on terminal failure."""
        policy = self.retry_policy
        attempt = 0
        while True:
            context = ErrorContext(method=method, url=url, attempt=attempt + 1)
            try:
                response = await self.client.request(
                    method, url, json=json, params=params, headers=headers,
                )
                payload = self.classifier.classify(response, context)
                self._log_success(method, url, attempt)
                return payload
            except BridgeError as e:
                failure = e
            except httpx.TimeoutException as e:
                failure = RequestTimeoutError(f"Request timeout: {e}", context=context)
            except httpx.TransportError as e:
                failure = TransportError(f"Network error: {e}", context=context)
            except httpx.RequestError as e:
                failure = ClientError(f"Request could not be completed: {e}", context=context)
            except Exception as e:
                # bad URL, unserializable body: never retried
                failure = ClientError(
                    f"Request could not be built: {type(e).__name__}: {e}",
                    code=ErrorCode.INVALID_PARAMS, context=context,
                )
                failure.__cause__ = e

            if not policy.should_retry(failure, attempt):
                self._fail(failure, attempt)
                raise failure

            delay = policy.delay_ms(attempt)
            logger.warning(
                f"[{self.name}] {method} {url} failed ({failure.code.value}), "
                f"retry after {delay}ms (attempt {attempt + 1}/{policy.max_retries + 1})",
                extra={"attempt": attempt + 1, "status_code": failure.status_code},
            )
            await asyncio.sleep(delay / 1000)
            attempt += 1

    def _log_success(self, method: str, url: str, attempt: int) -> None:
        logger.debug(
            f"[{self.name}] {method} {url} succeeded",
            extra={"attempt": attempt + 1, "method": method, "url": url},
        )

    def _fail(self, failure: BridgeError, attempt: int) -> None:
        if attempt > 0:
            logger.error(
                f"[{self.name}] All {attempt + 1} attempts failed, giving up: {failure.message}",
                extra={"attempt": attempt + 1, "error_code": failure.code.value},
            )
        self.report(failure)

    def report(self, failure: BridgeError) -> None:
        """Forward a terminal failure to the error reporter (also for locally rejected requests)."""
        try:
            self._reporter.handle(failure)
        except Exception as e:
            logger.error(f"Error reporter raised while handling {failure.code.value}: {e}")
