import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

LOG_LEVEL_ENV = "TRAVELOPS_LOG_LEVEL"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    outcome: str,
    record_id: Any = None,
    trace_id: str | None = None,
    level: int = logging.INFO,
    **extra: Any,
) -> None:
    """One JSON line per action outcome; ``extra`` adds fields such as counts or error codes."""
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "record_id": None if record_id is None else str(record_id),
        "trace_id": trace_id,
        "outcome": outcome,
        **extra,
    }
    logger.log(level, json.dumps(payload, default=str))
