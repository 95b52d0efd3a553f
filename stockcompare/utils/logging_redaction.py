"""
Logging redaction helpers.
Redacts API tokens from log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Finnhub passes its key as a query parameter: ?token=<key>
    (re.compile(r"(?i)([?&]token=)([^&\s\"']+)"), r"\1[REDACTED]"),
    # X-Finnhub-Token header or config dumps
    (re.compile(r"(?i)(x-finnhub-token|finnhub_api_key)\s*[:=]\s*['\"]?([A-Za-z0-9\-\._]+)"), r"\1=[REDACTED]"),
    # Generic api key key/value
    (re.compile(r"(?i)(api[_-]?key)\s*[:=]\s*([A-Za-z0-9\-\._]+)"), r"\1=[REDACTED]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed format args; let the handler report it
            return True
        record.msg = redact_message(message)
        record.args = ()
        return True


def install_redaction_filter() -> None:
    root = logging.getLogger()
    # Avoid duplicate filters
    for existing in root.filters:
        if isinstance(existing, RedactingFilter):
            return
    filt = RedactingFilter()
    root.addFilter(filt)
    # Root logger filters do not apply to records from child loggers
    for handler in root.handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(filt)
