from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from travelops_console.app.infrastructure.errors.error_mapper import ErrorMapper
from travelops_console.app.infrastructure.logging.logger import get_logger, log_action
from travelops_console.app.ui.components.notification_center import NotificationCenter
from travelops_console.clients.travelops_sdk.collection_client import CollectionClient
from travelops_console.clients.travelops_sdk.errors import ApiError, MalformedResponseError


class RemoteCollectionFetcher:
    """Single GET of a collection; a failure yields exactly one error toast and is re-raised."""

    def __init__(
        self,
        client: CollectionClient,
        notifications: NotificationCenter,
        module: str,
        logger: logging.Logger | None = None,
        is_active: Callable[[], bool] | None = None,
    ) -> None:
        self.client = client
        self.notifications = notifications
        self.module = module
        self.logger = logger or get_logger("travelops_console.fetcher")
        self.is_active = is_active or (lambda: True)

    async def fetch(self, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        try:
            rows = await self.client.list_records(params)
        except ApiError as error:
            notifications = self.notifications if self.is_active() else None
            report_failure(self.logger, notifications, self.module, "fetch", error, fallback=f"Failed to load {self.module}")
            raise
        log_action(self.logger, self.module, "fetch", "success", count=len(rows))
        return rows


def report_failure(
    logger: logging.Logger,
    notifications: NotificationCenter | None,
    module: str,
    action: str,
    error: Exception,
    record_id: Any = None,
    fallback: str | None = None,
) -> None:
    extra: dict[str, Any] = {"code": getattr(error, "code", type(error).__name__)}
    if isinstance(error, MalformedResponseError):
        extra["raw_body"] = error.raw_body
    log_action(
        logger,
        module,
        action,
        "error",
        record_id=record_id,
        trace_id=getattr(error, "trace_id", None),
        level=logging.ERROR,
        **extra,
    )
    if notifications is None:
        return
    payload = ErrorMapper.to_payload(error, fallback=fallback)
    notifications.push(
        level="error",
        title=payload["title"],
        message=payload["message"],
        trace_id=payload["trace_id"],
        details={"code": payload["code"], "category": payload["category"]},
    )
