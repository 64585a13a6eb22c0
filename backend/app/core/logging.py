from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from .config import get_settings

_REQUEST_FIELDS = ("request_id", "path", "method", "status", "duration_ms", "user")
# request lines come from RequestLoggingMiddleware instead
_MUTED_LOGGERS = ("uvicorn.access",)


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (field, getattr(record, field))
            for field in _REQUEST_FIELDS
            if getattr(record, field, None) is not None
        )

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Attach JSON file and console handlers to the root logger once per process."""

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    settings = get_settings()
    formatter = JsonFormatter()
    handlers: list[logging.Handler] = [
        RotatingFileHandler(settings.log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(level or settings.log_level)

    for name in _MUTED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
