from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

SENSITIVE_KEY_MARKERS = ("token", "password", "secret", "authorization")


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def sanitize(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: sanitize(nested)
            for key, nested in value.items()
            if not any(marker in str(key).lower() for marker in SENSITIVE_KEY_MARKERS)
        }
    if isinstance(value, (list, tuple)):
        return [sanitize(item) for item in value]
    return value


def log_event(
    logger: logging.Logger,
    *,
    module: str,
    action: str,
    outcome: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    record = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "outcome": outcome,
    }
    record.update(sanitize(fields))
    logger.log(level, json.dumps(record, default=str))
