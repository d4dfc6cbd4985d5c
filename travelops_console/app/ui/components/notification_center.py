from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

Listener = Callable[[dict[str, Any]], None]


@dataclass
class NotificationCenter:
    """Transient toast queue; views subscribe to render new messages."""

    messages: list[dict[str, Any]] = field(default_factory=list)
    _listeners: list[Listener] = field(default_factory=list, repr=False)

    def push(
        self,
        *,
        level: str,
        title: str,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload = {
            "level": level,
            "title": title,
            "message": message,
            "trace_id": trace_id,
            "details": details or {},
        }
        self.messages.append(payload)
        for listener in list(self._listeners):
            listener(payload)
        return payload

    def success(self, title: str, message: str) -> dict[str, Any]:
        return self.push(level="success", title=title, message=message)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def errors(self) -> list[dict[str, Any]]:
        return [item for item in self.messages if item["level"] == "error"]

    def clear(self) -> None:
        self.messages.clear()

    def render(self) -> dict[str, Any]:
        return {"count": len(self.messages), "messages": list(self.messages)}
