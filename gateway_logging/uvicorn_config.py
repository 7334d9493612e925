# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Uvicorn logging configuration emitting the same JSON shape as StdoutLogger.

Access log lines contain full request URLs. OAuth callbacks carry the
authorization ``code`` in the query string, so query strings are stripped
from access log messages.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

_QUERY_STRING = re.compile(r"\?[^\s\"]*")


class JSONFormatter(logging.Formatter):
    """Formatter that renders a record as a single JSON object."""

    def __init__(self, logger_name: str = "uvicorn", strip_query: bool = False):
        super().__init__()
        self.logger_name = logger_name
        self.strip_query = strip_query

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if self.strip_query:
            message = _QUERY_STRING.sub("", message)

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": self.logger_name,
            "message": message,
        }
        if getattr(record, "extra", None):
            entry["extra"] = record.extra
        return json.dumps(entry, default=str)


def create_uvicorn_log_config(service_name: str, log_level: str = "INFO") -> dict[str, Any]:
    """Build a dictConfig for ``uvicorn.run(log_config=...)``.

    Args:
        service_name: Name reported in the ``logger`` field
        log_level: Level for uvicorn's server and error loggers

    Returns:
        Dictionary accepted by uvicorn's ``log_config`` parameter
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JSONFormatter,
                "logger_name": service_name,
            },
            "access_json": {
                "()": JSONFormatter,
                "logger_name": service_name,
                "strip_query": True,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access_json",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["console"], "level": log_level.upper(), "propagate": False},
            "uvicorn.error": {"handlers": ["console"], "level": log_level.upper(), "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        },
    }
