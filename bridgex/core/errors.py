"""Error Hierarchy — typed, classified failures for every outbound request.

Invariants:
    - Every error has a canonical code (ErrorCode), category, severity and status_code
    - status_code is the HTTP status actually received; None means no response arrived
    - BusinessError always carries status_code 200 and a non-zero business_code
    - Only TransportError, RequestTimeoutError and ServerError are ever retried

Design Decisions:
    - Single hierarchy with BridgeError base: callers catch one type (ADR: uniform error shape)
    - ErrorContext as dataclass: request details travel with the error, not in log calls
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from bridgex.core.error_codes import ErrorCode, map_business_error_code, map_http_status


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Failure classes of the request layer."""
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    SERVER = "server"
    CLIENT = "client"
    BUSINESS = "business"


@dataclass
class ErrorContext:
    """Request details attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    method: str | None = None
    url: str | None = None
    attempt: int | None = None
    debug_info: dict[str, Any] | None = None


class BridgeError(Exception):
    """Base exception for all request-layer failures."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.status_code = status_code

    @property
    def is_timeout(self) -> bool:
        return False

    def to_dict(self) -> dict:
        """Convert to a JSON-able error envelope."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "status_code": self.status_code,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "method": self.context.method,
                    "url": self.context.url,
                    "attempt": self.context.attempt,
                },
            }
        }


# ─── Retryable (transient) ──────────────────────────────────────

class TransportError(BridgeError):
    """No response reached the client (DNS, refused, reset)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, ErrorCode.NETWORK_ERROR, ErrorCategory.TRANSPORT,
            ErrorSeverity.ERROR, context, None,
        )


class RequestTimeoutError(TransportError):
    """Connect, read, write or pool timeout."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.code = ErrorCode.TIMEOUT
        self.category = ErrorCategory.TIMEOUT

    @property
    def is_timeout(self) -> bool:
        return True


class ServerError(BridgeError):
    """HTTP 5xx."""
    def __init__(
        self, status_code: int, message: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message or f"Server responded with {status_code}",
            ErrorCode.SERVER_ERROR, ErrorCategory.SERVER,
            ErrorSeverity.CRITICAL, context, status_code,
        )


# ─── Non-retryable ──────────────────────────────────────────────

class ClientError(BridgeError):
    """HTTP 4xx, an undecodable body, or a request rejected locally."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
    ):
        if code is None:
            code = map_http_status(status_code) if status_code else ErrorCode.CLIENT_ERROR
        super().__init__(
            message, code, ErrorCategory.CLIENT,
            ErrorSeverity.ERROR, context, status_code,
        )


class BusinessError(BridgeError):
    """Application-level failure code inside an HTTP 200 body."""
    def __init__(
        self,
        business_code: int,
        message: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message or "Business error occurred",
            map_business_error_code(business_code), ErrorCategory.BUSINESS,
            ErrorSeverity.WARNING, context, 200,
        )
        self.business_code = business_code
        self.original_message = message

    def to_dict(self) -> dict:
        envelope = super().to_dict()
        envelope["error"]["business_code"] = self.business_code
        return envelope
