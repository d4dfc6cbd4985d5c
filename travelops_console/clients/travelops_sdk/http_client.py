from __future__ import annotations

from typing import Any

import httpx

from travelops_console.clients.travelops_sdk.errors import NetworkError, from_http_response, malformed
from travelops_console.clients.travelops_sdk.tracing import TRACE_HEADER, new_trace_id, trace_id_from_headers


class HttpClient:
    """Async JSON client; every failure is raised once, never retried."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 20,
        verify_ssl: bool = True,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.verify_ssl = verify_ssl
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            verify=verify_ssl,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        trace_id = new_trace_id()
        request_headers = {"Accept": "application/json", TRACE_HEADER: trace_id}
        request_headers.update(headers or {})
        if self.token:
            request_headers["Authorization"] = f"Bearer {self.token}"
        normalized_path = path if path.startswith("/") else f"/{path}"

        try:
            response = await self._client.request(
                method.upper(),
                normalized_path,
                json=json_body,
                params=params,
                headers=request_headers,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(
                code="TIMEOUT_ERROR",
                message="The server took too long to respond. Try again.",
                details=str(exc),
                trace_id=trace_id,
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkError(
                code="NETWORK_ERROR",
                message="Could not reach the server. Check your connection and try again.",
                details=str(exc),
                trace_id=trace_id,
            ) from exc

        trace_id = trace_id_from_headers(response.headers, fallback=trace_id)
        if not response.is_success:
            raise from_http_response(response, trace_id=trace_id)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise malformed(response, trace_id=trace_id) from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
