# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Stdout logger implementation with structured JSON output."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .logger import LEVELS, Logger


class StdoutLogger(Logger):
    """Logger that writes one JSON object per line to stdout.

    Records are also forwarded to the stdlib logger of the same name so that
    pytest's ``caplog`` and any configured handlers can observe them.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        super().__init__(level=level, name=name)
        self._stdlib_logger = logging.getLogger(self.name)
        # Filtering happens in Logger._log; inherit the root level here
        self._stdlib_logger.setLevel(logging.NOTSET)

    def _emit(self, level: str, message: str, fields: dict[str, Any], exc_info: Any = None) -> None:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
        }
        if fields:
            entry["extra"] = fields

        try:
            print(json.dumps(entry, default=str), file=sys.stdout, flush=True)
        except (TypeError, ValueError) as e:
            print(f"{level}: {message} (JSON serialization failed: {e})", file=sys.stderr, flush=True)

        extra = {"extra": fields} if fields else None
        self._stdlib_logger.log(LEVELS[level], message, exc_info=exc_info, extra=extra)
