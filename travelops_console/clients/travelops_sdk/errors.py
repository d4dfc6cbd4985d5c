from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from travelops_console.clients.travelops_sdk.tracing import trace_id_from_headers

GENERIC_FAILURE_MESSAGE = "Unexpected response from the server."
RAW_BODY_LIMIT = 2000


class ErrorPayload(BaseModel):
    error: str


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: Any = None
    trace_id: str | None = None
    status_code: int | None = None
    raw_body: str | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"{self.code}: {self.message}{trace}"


class NetworkError(ApiError):
    """The request could not be sent or timed out."""


class ServerError(ApiError):
    """Non-2xx response carrying a structured ``{"error": ...}`` body."""


class MalformedResponseError(ApiError):
    """Response body is not the expected shape (HTML page, wrong JSON...)."""


@dataclass
class ValidationError(Exception):
    field_errors: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        fields = ", ".join(self.field_errors) or "form"
        return f"VALIDATION_ERROR: invalid {fields}"


def from_http_response(response: httpx.Response, trace_id: str | None = None) -> ApiError:
    resolved_trace_id = trace_id_from_headers(response.headers, fallback=trace_id)
    try:
        payload = ErrorPayload.model_validate(response.json())
    except (ValueError, PydanticValidationError):
        return malformed(response, trace_id=resolved_trace_id)
    return ServerError(
        code="SERVER_ERROR",
        message=payload.error,
        trace_id=resolved_trace_id,
        status_code=response.status_code,
    )


def malformed(response: httpx.Response, trace_id: str | None = None) -> MalformedResponseError:
    return MalformedResponseError(
        code="MALFORMED_RESPONSE",
        message=GENERIC_FAILURE_MESSAGE,
        trace_id=trace_id,
        status_code=response.status_code,
        raw_body=response.text[:RAW_BODY_LIMIT],
    )
