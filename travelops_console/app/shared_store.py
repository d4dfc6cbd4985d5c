from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from travelops_console.app.infrastructure.logging.logger import get_logger, log_action

SIDEBAR_EXPANDED = "sidebar.expanded"
DEFAULTS: dict[str, Any] = {SIDEBAR_EXPANDED: True}

Subscriber = Callable[[str, Any], None]

logger = get_logger("travelops_console.shared_store")


class SharedStore:
    """Explicit store for UI state shared by independently mounted views.

    Readers call ``get``; writers call ``set``, which notifies every subscriber of
    that key (or of all keys when subscribed with ``key=None``). With a
    ``path`` the values survive restarts as a JSON file.
    """

    def __init__(self, path: str | Path | None = None, defaults: dict[str, Any] | None = None) -> None:
        self.path = Path(path) if path else None
        self._values: dict[str, Any] = dict(DEFAULTS if defaults is None else defaults)
        self._subscribers: list[tuple[str | None, Subscriber]] = []
        self._values.update(self._load())

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def set(self, key: str, value: Any) -> None:
        if key in self._values and self._values[key] == value:
            return
        self._values[key] = value
        self._save()
        for subscribed_key, subscriber in list(self._subscribers):
            if subscribed_key is None or subscribed_key == key:
                subscriber(key, value)

    def toggle(self, key: str) -> bool:
        value = not bool(self.get(key))
        self.set(key, value)
        return value

    def subscribe(self, subscriber: Subscriber, key: str | None = None) -> Callable[[], None]:
        entry = (key, subscriber)
        self._subscribers.append(entry)

        def _unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return _unsubscribe

    def _load(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as exc:
            log_action(logger, "shared_store", "load", "ignored", level=logging.WARNING, path=str(self.path), reason=str(exc))
            return {}
        return payload if isinstance(payload, dict) else {}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, ensure_ascii=False, indent=2), encoding="utf-8")
