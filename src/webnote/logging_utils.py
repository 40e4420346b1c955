from __future__ import annotations

import logging
from copy import copy, deepcopy
from typing import Any
from urllib.parse import unquote, urlsplit

from uvicorn.config import LOGGING_CONFIG
from uvicorn.logging import AccessFormatter as UvicornAccessFormatter

APP_LOGGER = "webnote"
# The editor page polls this every few seconds.
STATUS_POLL_PATH = "/api/status"


def _access_fields(record: logging.LogRecord) -> tuple[Any, ...] | None:
    """Return uvicorn's (client, method, path, http_version, status) args, if present."""
    args = record.args
    if isinstance(args, tuple) and len(args) == 5:
        return args
    return None


class Utf8AccessFormatter(UvicornAccessFormatter):
    """Access formatter that prints percent-decoded paths, so CJK file names stay readable."""

    def formatMessage(self, record):  # type: ignore[override]
        fields = _access_fields(record)
        if fields is None or not isinstance(fields[2], str):
            return super().formatMessage(record)
        client_addr, method, full_path, http_version, status_code = fields
        new_record = copy(record)
        new_record.args = (
            client_addr,
            method,
            unquote(full_path, encoding="utf-8", errors="replace"),
            http_version,
            status_code,
        )
        return super().formatMessage(new_record)


class StatusPollFilter(logging.Filter):
    """Drops successful status-poll lines from the access log."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = _access_fields(record)
        if fields is None:
            return True
        _, method, full_path, _, status_code = fields
        if method != "GET" or not isinstance(full_path, str):
            return True
        if urlsplit(full_path).path != STATUS_POLL_PATH:
            return True
        try:
            return int(status_code) >= 400
        except (TypeError, ValueError):
            return True


def build_uvicorn_log_config(level: str = "INFO") -> dict[str, Any]:
    """
    Return a uvicorn ``log_config`` that also routes the ``webnote`` logger.

    Application messages (dialog choices, read/write failures) go through
    uvicorn's ``default`` handler so they share its format and stream. Status
    polls are kept out of the access log unless ``level`` is debug.
    """
    config = deepcopy(LOGGING_CONFIG)
    formatter = config.get("formatters", {}).get("access")
    if isinstance(formatter, dict):
        formatter["()"] = "webnote.logging_utils.Utf8AccessFormatter"
    if level.upper() != "DEBUG":
        config.setdefault("filters", {})["status_poll"] = {
            "()": "webnote.logging_utils.StatusPollFilter",
        }
        access_handler = config.get("handlers", {}).get("access")
        if isinstance(access_handler, dict):
            access_handler.setdefault("filters", []).append("status_poll")
    loggers = config.setdefault("loggers", {})
    loggers[APP_LOGGER] = {
        "handlers": ["default"],
        "level": level.upper(),
        "propagate": False,
    }
    return config


__all__ = [
    "APP_LOGGER",
    "STATUS_POLL_PATH",
    "StatusPollFilter",
    "Utf8AccessFormatter",
    "build_uvicorn_log_config",
]
