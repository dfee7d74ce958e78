"""Error Handler — resolves failures to the canonical taxonomy and reports them once.

Invariants:
    - handle() logs exactly one structured entry per call and never raises
    - Re-raising is the caller's job: the handler only classifies and reports
"""

import logging

from bridgex.core.error_codes import ErrorCode
from bridgex.core.errors import BridgeError, BusinessError
from bridgex.core.log_types import LogCategory
from bridgex.infrastructure.structured_logger import StructuredLogger, get_logger

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Maps an exception to an ErrorCode and forwards it to the structured logger."""

    def __init__(self, structured_logger: StructuredLogger):
        self._logger = structured_logger

    def handle(
        self,
        error: BaseException,
        error_code: ErrorCode | None = None,
        message: str | None = None,
    ) -> ErrorCode:
        code = self.resolve_code(error, error_code)
        try:
            self._logger.error(
                LogCategory.API,
                message or _title_for(error),
                error=error,
                data=_describe(error, code),
            )
        except Exception as e:
            logger.error(f"Error handler failed to report {code.value}: {e}")
        return code

    @staticmethod
    def resolve_code(
        error: BaseException, error_code: ErrorCode | None = None,
    ) -> ErrorCode:
        if error_code is not None:
            return error_code
        if isinstance(error, BridgeError):
            return error.code
        return ErrorCode.UNKNOWN


def _title_for(error: BaseException) -> str:
    if isinstance(error, BusinessError):
        return "Business error"
    if isinstance(error, BridgeError):
        return f"Request failed ({error.category.value})"
    return "Unexpected error"


def _describe(error: BaseException, code: ErrorCode) -> dict:
    data: dict = {"code": code.value}
    if isinstance(error, BridgeError):
        data["status_code"] = error.status_code
        data["method"] = error.context.method
        data["url"] = error.context.url
        data["attempt"] = error.context.attempt
    if isinstance(error, BusinessError):
        data["business_code"] = error.business_code
    return data


_default_handler: ErrorHandler | None = None


def get_error_handler() -> ErrorHandler:
    global _default_handler
    if _default_handler is None:
        _default_handler = ErrorHandler(get_logger())
    return _default_handler


def handle_error(
    error: BaseException,
    error_code: ErrorCode | None = None,
    message: str | None = None,
) -> ErrorCode:
    """Report through the process-wide handler."""
    return get_error_handler().handle(error, error_code, message)
