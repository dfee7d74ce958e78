"""Bridge API Schemas — Pydantic models for request params and the response envelope.

Invariants:
    - BridgeConfigParams.host: stripped, non-empty
    - ApiResponseData.code == 0 means success; anything else never reaches these models
      (the request client raises BusinessError first)
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")


class ApiResponseData(BaseModel, Generic[T]):
    """Envelope shared by every bridge API response."""
    code: int
    message: str | None = None
    data: T | None = None


class BridgeConfigParams(BaseModel):
    """POST /bridge/config body."""
    host: str = Field(min_length=1, max_length=253)

    @field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("host cannot be empty or whitespace")
        return v


BridgeConfigResponse = ApiResponseData[dict[str, Any]]
