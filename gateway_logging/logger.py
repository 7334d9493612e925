# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Abstract logger interface with level filtering and secret redaction."""

import logging
from abc import ABC, abstractmethod
from typing import Any

REDACTED = "[REDACTED]"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# Field names are compared case-insensitively
SENSITIVE_FIELDS = frozenset({
    "access_token",
    "authorization",
    "client_secret",
    "code",
    "password",
    "secret",
    "session_id",
    "signing_secret",
    "token",
})


def redact(fields: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``fields`` with credential-bearing values masked.

    Nested dictionaries are redacted recursively.

    Args:
        fields: Structured data attached to a log call

    Returns:
        New dictionary safe to write to a log sink
    """
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if key.lower() in SENSITIVE_FIELDS:
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = redact(value)
        else:
            cleaned[key] = value
    return cleaned


class Logger(ABC):
    """Base class for loggers.

    Subclasses implement ``_emit``; level filtering and redaction happen here
    so every backend gets the same guarantees.

    Attributes:
        level: Minimum level that is emitted
        name: Logger name used to identify the component
    """

    filters_by_level = True

    def __init__(self, level: str = "INFO", name: str | None = None):
        self.level = level.upper()
        self.name = name or "gateway"

        if self.level not in LEVELS:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(LEVELS.keys())}")

    @abstractmethod
    def _emit(self, level: str, message: str, fields: dict[str, Any], exc_info: Any = None) -> None:
        """Write one already-redacted entry to the backend.

        Args:
            level: Log level name
            message: The log message
            fields: Redacted structured data
            exc_info: Exception info forwarded to stdlib logging
        """
        pass

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        if self.filters_by_level and LEVELS[level] < LEVELS[self.level]:
            return
        exc_info = kwargs.pop("exc_info", None)
        self._emit(level, message, redact(kwargs), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug-level message."""
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info-level message."""
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning-level message."""
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message."""
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message with the active exception attached.

        Intended for use inside an ``except`` block.
        """
        kwargs.setdefault("exc_info", True)
        self._log("ERROR", message, **kwargs)
