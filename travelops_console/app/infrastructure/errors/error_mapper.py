from typing import Any

from travelops_console.clients.travelops_sdk.errors import (
    GENERIC_FAILURE_MESSAGE,
    ApiError,
    MalformedResponseError,
    NetworkError,
    ServerError,
    ValidationError,
)


class ErrorMapper:
    """Turns any action failure into the payload of one error toast."""

    _TITLES = {
        "network": "Connection problem",
        "server": "Error",
        "malformed": "Unexpected response",
        "validation": "Check the form",
        "internal": "Error",
    }

    @classmethod
    def category(cls, error: Exception) -> str:
        if isinstance(error, NetworkError):
            return "network"
        if isinstance(error, ServerError):
            return "server"
        if isinstance(error, MalformedResponseError):
            return "malformed"
        if isinstance(error, ValidationError):
            return "validation"
        return "internal"

    @classmethod
    def to_payload(cls, error: Exception, fallback: str | None = None) -> dict[str, Any]:
        category = cls.category(error)
        if category == "server":
            message = error.message
        elif category == "malformed":
            message = fallback or GENERIC_FAILURE_MESSAGE
        elif category == "validation":
            message = "Please correct: " + ", ".join(error.field_errors)
        elif isinstance(error, ApiError):
            message = error.message
        else:
            message = fallback or GENERIC_FAILURE_MESSAGE
        return {
            "category": category,
            "title": cls._TITLES[category],
            "message": message,
            "code": getattr(error, "code", "INTERNAL_ERROR"),
            "status_code": getattr(error, "status_code", None),
            "trace_id": getattr(error, "trace_id", None),
        }

    @classmethod
    def to_display_message(cls, error: Exception) -> str:
        payload = cls.to_payload(error)
        return f"[{payload['code']}] {payload['message']} (trace_id={payload['trace_id']})"
