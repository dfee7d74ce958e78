"""Error Codes — canonical error taxonomy and the mappings into it.

Invariants:
    - Every failure resolves to exactly one ErrorCode
    - Unknown business codes map to BUSINESS_ERROR, never to UNKNOWN
    - Business code 0 is the "ok" sentinel and is never mapped
"""

from enum import Enum


OK_CODE = 0


class ErrorCode(str, Enum):
    """Canonical error codes shared by the request layer and the logger."""
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    SERVER_ERROR = "SERVER_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    BUSINESS_ERROR = "BUSINESS_ERROR"
    INSUFFICIENT_LIQUIDITY = "INSUFFICIENT_LIQUIDITY"
    INVALID_PARAMS = "INVALID_PARAMS"
    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"
    UNSUPPORTED_TOKEN = "UNSUPPORTED_TOKEN"
    AMOUNT_TOO_LOW = "AMOUNT_TOO_LOW"
    AMOUNT_TOO_HIGH = "AMOUNT_TOO_HIGH"
    UNKNOWN = "UNKNOWN"


# Codes returned in the `code` field of bridge API bodies
BUSINESS_CODE_MAP: dict[int, ErrorCode] = {
    1000: ErrorCode.INVALID_PARAMS,
    1001: ErrorCode.INSUFFICIENT_LIQUIDITY,
    1002: ErrorCode.AMOUNT_TOO_LOW,
    1003: ErrorCode.AMOUNT_TOO_HIGH,
    1004: ErrorCode.UNSUPPORTED_CHAIN,
    1005: ErrorCode.UNSUPPORTED_TOKEN,
}


def map_business_error_code(code: int) -> ErrorCode:
    """Map an API business code to the canonical taxonomy."""
    return BUSINESS_CODE_MAP.get(code, ErrorCode.BUSINESS_ERROR)


def map_http_status(status: int) -> ErrorCode:
    """Map a non-2xx HTTP status to the canonical taxonomy."""
    if status in (401, 403):
        return ErrorCode.UNAUTHORIZED
    if status == 404:
        return ErrorCode.NOT_FOUND
    if status == 429:
        return ErrorCode.RATE_LIMITED
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    if status >= 400:
        return ErrorCode.CLIENT_ERROR
    return ErrorCode.UNKNOWN
