"""
Secure Logging Module
=====================

Provides logging that never leaks key material.

Features:
- Automatic redaction of hex keys, base64 blobs and PEM blocks
- Structured (JSON) output support
- Handlers installed once per logger name
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Final, Optional, Pattern


_SENSITIVE_PATTERNS: Final[list[tuple[str, Pattern[str]]]] = [
    ("pem", re.compile(r"-----BEGIN [A-Z ]+-----.*?-----END [A-Z ]+-----", re.DOTALL)),
    ("key", re.compile(r'(?i)\b(key|secret|private[_-]?key|shift)\s*[=:]\s*["\']?[^\s"\',]+["\']?')),
    # Base64 blobs (ciphertext or RSA chunks)
    ("base64_secret", re.compile(r"[A-Za-z0-9+/]{40,}={0,2}")),
    # Hex encoded keys (AES/Blowfish are at least 128 bits)
    ("hex_secret", re.compile(r"(?i)\b(?:0x)?[a-f0-9]{32,}\b")),
]

_REDACTED_TEXT: Final[str] = "[REDACTED]"


class SecureLogFilter(logging.Filter):
    """
    Log filter that removes key material from log messages.

    Messages and string arguments are scanned for patterns that look like
    keys (hex strings, PEM blocks, ``key=...`` assignments, long base64
    runs) and those spans are replaced with ``[REDACTED]``.
    """

    def __init__(self, name: str = "", additional_patterns: Optional[list[Pattern[str]]] = None) -> None:
        super().__init__(name)
        self._additional_patterns = additional_patterns or []

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log record by redacting sensitive information.

        Returns:
            Always True (record is always kept, just sanitized)
        """
        if record.msg and isinstance(record.msg, str):
            record.msg = self._sanitize(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._sanitize(v) if isinstance(v, str) else v
                               for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._sanitize(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True

    def _sanitize(self, text: str) -> str:
        result = text

        for name, pattern in _SENSITIVE_PATTERNS:
            result = pattern.sub(f"{name}={_REDACTED_TEXT}", result)

        for pattern in self._additional_patterns:
            result = pattern.sub(_REDACTED_TEXT, result)

        return result


class StructuredLogFormatter(logging.Formatter):
    """Formatter that outputs logs in JSON format for easy parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_secure_logger(
    name: str,
    level: Optional[str] = None,
    enable_console: Optional[bool] = None,
    enable_json: Optional[bool] = None,
) -> logging.Logger:
    """
    Create a logger with automatic key redaction.

    Unset arguments fall back to the values in ``ChainConfig``.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Whether to output to stderr
        enable_json: Whether to emit JSON lines instead of plain text

    Returns:
        Configured logger instance
    """
    from cipherchain.core.config import ChainConfig

    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    settings = ChainConfig.get_instance().logging
    level = level or settings.level
    enable_console = settings.enable_console if enable_console is None else enable_console
    enable_json = settings.enable_json if enable_json is None else enable_json

    logger.setLevel(getattr(logging, level.upper()))

    secure_filter = SecureLogFilter()
    # Filters on the logger also cover records captured by test handlers
    logger.addFilter(secure_filter)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        if enable_json:
            console_handler.setFormatter(StructuredLogFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(settings.format, datefmt=settings.date_format))
        console_handler.addFilter(secure_filter)
        logger.addHandler(console_handler)
    else:
        logger.addHandler(logging.NullHandler())

    return logger
