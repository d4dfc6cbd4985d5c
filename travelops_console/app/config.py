from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from travelops_console.app.ui.sorting import collator_for

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class AppConfig:
    base_url: str
    timeout_seconds: float
    verify_ssl: bool
    api_token: str | None
    page_size: int
    locale: str
    update_method: str
    store_path: str | None

    @classmethod
    def from_env(cls, env_file: str = ".env") -> "AppConfig":
        load_dotenv(env_file)
        config = cls(
            base_url=os.getenv("TRAVELOPS_BASE_URL", DEFAULT_BASE_URL).strip(),
            timeout_seconds=_read_float("TRAVELOPS_TIMEOUT_SECONDS", "20"),
            verify_ssl=parse_bool(os.getenv("TRAVELOPS_VERIFY_SSL"), default=True),
            api_token=(os.getenv("TRAVELOPS_API_TOKEN") or "").strip() or None,
            page_size=_read_int("TRAVELOPS_PAGE_SIZE", str(DEFAULT_PAGE_SIZE)),
            locale=os.getenv("TRAVELOPS_LOCALE", "en").strip(),
            update_method=os.getenv("TRAVELOPS_UPDATE_METHOD", "PATCH").strip().upper(),
            store_path=(os.getenv("TRAVELOPS_STORE_PATH") or "").strip() or None,
        )
        config.validate()
        return config

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("TRAVELOPS_BASE_URL must not be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("TRAVELOPS_TIMEOUT_SECONDS must be greater than 0")
        if self.page_size < 1:
            raise ValueError("TRAVELOPS_PAGE_SIZE must be >= 1")
        if self.update_method not in {"PUT", "PATCH"}:
            raise ValueError("TRAVELOPS_UPDATE_METHOD must be PUT or PATCH")
        collator_for(self.locale)


def parse_bool(value: str | bool | None, default: bool = True) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {name}: expected an integer, got {raw!r}") from exc
