# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""In-memory logger for tests."""

from typing import Any

from .logger import Logger


class SilentLogger(Logger):
    """Logger that keeps entries in memory and prints nothing.

    Every level is captured regardless of ``level`` so tests can assert on
    debug output too.
    """

    filters_by_level = False

    def __init__(self, level: str = "INFO", name: str | None = None):
        super().__init__(level=level, name=name)
        self.logs: list[dict[str, Any]] = []

    def _emit(self, level: str, message: str, fields: dict[str, Any], exc_info: Any = None) -> None:
        entry: dict[str, Any] = {"level": level, "message": message}
        if fields:
            entry["extra"] = fields
        self.logs.append(entry)

    def clear_logs(self) -> None:
        self.logs.clear()

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        """Get stored entries, optionally filtered by level."""
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level.upper()]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Check whether any stored entry contains ``message``."""
        return any(message in log["message"] for log in self.get_logs(level))
