from __future__ import annotations

from typing import Any

from travelops_console.clients.travelops_sdk.http_client import HttpClient
from travelops_console.clients.travelops_sdk.normalizers import normalize_collection, normalize_record

UPDATE_METHODS = {"PUT", "PATCH"}


class CollectionClient:
    """REST collection endpoint: list, get, create, update and delete records."""

    def __init__(self, http_client: HttpClient, endpoint: str, update_method: str = "PATCH") -> None:
        method = update_method.upper()
        if method not in UPDATE_METHODS:
            raise ValueError(f"update_method must be one of {sorted(UPDATE_METHODS)}, got {update_method!r}")
        self.http_client = http_client
        self.endpoint = "/" + endpoint.strip("/")
        self.update_method = method

    async def list_records(self, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        payload = await self.http_client.request("GET", self.endpoint, params=_clean_params(params or {}))
        return normalize_collection(payload)

    async def get_record(self, record_id: Any) -> dict[str, Any]:
        payload = await self.http_client.request("GET", self.endpoint, params={"id": record_id})
        return normalize_record(payload)

    async def create_record(self, values: dict[str, Any]) -> dict[str, Any]:
        body = {key: value for key, value in values.items() if key != "id"}
        payload = await self.http_client.request("POST", self.endpoint, json_body=body)
        return normalize_record(payload)

    async def update_record(self, record_id: Any, fields: dict[str, Any]) -> dict[str, Any]:
        body = {"id": record_id, **{key: value for key, value in fields.items() if key != "id"}}
        payload = await self.http_client.request(self.update_method, self.endpoint, json_body=body)
        return normalize_record(payload)

    async def delete_record(self, record_id: Any) -> None:
        await self.http_client.request("DELETE", f"{self.endpoint}/{record_id}")


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value not in (None, "")}
