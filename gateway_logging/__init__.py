# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Structured logging for the OAuth gateway.

Every log line is a single JSON object so that sign-in flows can be traced
across requests. Keyword fields that carry credentials (client secrets,
access tokens, authorization codes) are redacted before they are emitted.

Example:
    >>> from gateway_logging import create_logger
    >>> logger = create_logger(logger_type="stdout", level="INFO", name="gateway")
    >>> logger.info("Callback received", provider="github")
    >>>
    >>> # In tests, capture entries in memory instead of printing them
    >>> test_logger = create_logger(logger_type="silent")
    >>> test_logger.warning("Using ephemeral signing secret")
"""

__version__ = "0.1.0"

from .factory import create_logger
from .logger import REDACTED, Logger, redact
from .silent_logger import SilentLogger
from .stdout_logger import StdoutLogger
from .uvicorn_config import create_uvicorn_log_config

__all__ = [
    "__version__",
    "Logger",
    "REDACTED",
    "SilentLogger",
    "StdoutLogger",
    "create_logger",
    "create_uvicorn_log_config",
    "redact",
]
