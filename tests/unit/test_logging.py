from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from backend.app.core import config
from backend.app.core.logging import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def reset_settings_cache() -> None:
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def _record(**attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="dreamscape.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="saved %s logs",
        args=(3,),
        exc_info=attrs.pop("exc_info", None),
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_configure_logging_is_idempotent(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    log_file = tmp_path / "dreamscape.log"
    monkeypatch.setenv("LOG_FILE", str(log_file))
    monkeypatch.chdir(tmp_path)

    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    try:
        configure_logging()
        file_handlers = [h for h in root_logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == log_file
        assert all(isinstance(h.formatter, JsonFormatter) for h in root_logger.handlers)

        handler_count = len(root_logger.handlers)
        configure_logging()
        assert len(root_logger.handlers) == handler_count
    finally:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        for handler in original_handlers:
            root_logger.addHandler(handler)


def test_json_formatter_merges_request_and_extra_fields() -> None:
    record = _record(
        request_id="req-9",
        status=201,
        user=None,
        extra_fields={"generated": 42},
    )
    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "saved 3 logs"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "dreamscape.test"
    assert payload["request_id"] == "req-9"
    assert payload["status"] == 201
    assert payload["generated"] == 42
    assert "user" not in payload


def test_json_formatter_includes_traceback() -> None:
    try:
        raise ValueError("broken")
    except ValueError:
        record = _record(exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: broken" in payload["exc_info"]
