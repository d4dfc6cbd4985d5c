from __future__ import annotations

import json
from typing import Any

from travelops_console.clients.travelops_sdk.errors import (
    GENERIC_FAILURE_MESSAGE,
    RAW_BODY_LIMIT,
    MalformedResponseError,
)

LIST_ENVELOPE_KEYS = ("items", "data", "rows")


def normalize_collection(payload: Any) -> list[dict[str, Any]]:
    rows: Any = None
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        rows = next((payload[key] for key in LIST_ENVELOPE_KEYS if isinstance(payload.get(key), list)), None)

    if rows is None:
        raise _malformed(payload, "expected a list of records")
    return [normalize_record(row) for row in rows]


def normalize_record(payload: Any) -> dict[str, Any]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict) and "id" not in payload:
        payload = payload["data"]
    if not isinstance(payload, dict):
        raise _malformed(payload, "expected a record object")
    if payload.get("id") in (None, ""):
        raise _malformed(payload, "record without id")
    return dict(payload)


def _malformed(payload: Any, reason: str) -> MalformedResponseError:
    try:
        raw_body = json.dumps(payload, default=str)
    except (TypeError, ValueError):
        raw_body = repr(payload)
    return MalformedResponseError(
        code="MALFORMED_RESPONSE",
        message=GENERIC_FAILURE_MESSAGE,
        details=reason,
        raw_body=raw_body[:RAW_BODY_LIMIT],
    )
