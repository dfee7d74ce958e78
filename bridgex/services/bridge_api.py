"""Bridge API — client factories and the bridge config call site.

Invariants:
    - Two independent clients: default (30s timeout) and config (5s timeout), same retry shape
    - get_bridge_config() returns only code == 0 envelopes; failures raise BridgeError
    - Invalid params are rejected locally as ClientError(INVALID_PARAMS), never sent
"""

import logging

import httpx
from pydantic import ValidationError

from bridgex.config import Settings, get_settings
from bridgex.core.error_codes import ErrorCode
from bridgex.core.errors import ClientError, ErrorContext
from bridgex.infrastructure.request_client import (
    ErrorReporter,
    ResilientRequestClient,
    RetryPolicy,
)
from bridgex.schemas.bridge import BridgeConfigParams, BridgeConfigResponse
from bridgex.services.error_handler import get_error_handler

logger = logging.getLogger(__name__)

BRIDGE_CONFIG_PATH = "/bridge/config"


async def _log_request(request: httpx.Request) -> None:
    logger.debug(
        f"-> {request.method} {request.url}",
        extra={"method": request.method, "url": str(request.url)},
    )


async def _log_response(response: httpx.Response) -> None:
    logger.debug(
        f"<- {response.status_code} {response.request.method} {response.request.url}",
        extra={"status_code": response.status_code, "url": str(response.request.url)},
    )


def _retry_policy(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_retries=settings.request_max_retries,
        base_delay_ms=settings.request_base_delay_ms,
    )


def create_default_client(
    settings: Settings | None = None,
    error_reporter: ErrorReporter | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResilientRequestClient:
    settings = settings or get_settings()
    return ResilientRequestClient(
        error_reporter=error_reporter or get_error_handler(),
        base_url=settings.base_url,
        timeout_seconds=settings.request_timeout_seconds,
        retry_policy=_retry_policy(settings),
        request_hooks=[_log_request],
        response_hooks=[_log_response],
        transport=transport,
        name="default",
    )


def create_bridge_config_client(
    settings: Settings | None = None,
    error_reporter: ErrorReporter | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResilientRequestClient:
    """Client for the small, time-bounded config endpoint."""
    settings = settings or get_settings()
    return ResilientRequestClient(
        error_reporter=error_reporter or get_error_handler(),
        base_url=settings.base_url,
        timeout_seconds=settings.config_request_timeout_seconds,
        retry_policy=_retry_policy(settings),
        request_hooks=[_log_request],
        response_hooks=[_log_response],
        transport=transport,
        name="bridge-config",
    )


async def get_bridge_config(
    client: ResilientRequestClient, host: str,
) -> BridgeConfigResponse:
    """POST /bridge/config for `host`."""
    try:
        params = BridgeConfigParams(host=host)
    except ValidationError as e:
        failure = ClientError(
            f"Invalid bridge config params: {e.errors()[0]['msg']}",
            code=ErrorCode.INVALID_PARAMS,
            context=ErrorContext(method="POST", url=BRIDGE_CONFIG_PATH),
        )
        client.report(failure)
        raise failure from e

    payload = await client.post(BRIDGE_CONFIG_PATH, json=params.model_dump())
    try:
        return BridgeConfigResponse.model_validate(payload)
    except ValidationError as e:
        failure = ClientError(
            "Bridge config response does not match the API envelope",
            status_code=200,
            code=ErrorCode.INVALID_RESPONSE,
            context=ErrorContext(method="POST", url=BRIDGE_CONFIG_PATH),
        )
        client.report(failure)
        raise failure from e
