"""Centralized logging helpers.

Provides environment-driven logging setup plus small utilities used for
structured DEBUG traces (extra context, URL redaction, timing). Kept free of
project imports other than constants so every module can use it.
"""
from __future__ import annotations

import json
import logging
import os
import re
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants, LogFormats

SENSITIVE_PARAMS = {"access_token", "token", "sid", "password", "client_secret", "code"}
_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9!._\-]+", re.IGNORECASE)
_SESSION_ID_RE = re.compile(r"\b00D[A-Za-z0-9]{12,15}![A-Za-z0-9._\-]+")

# Attributes present on every LogRecord; anything else came in through `extra`.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object, including extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(stream: Optional[Any] = None) -> None:
    """Configure the root logger from DEPUPDATE_LOG_LEVEL / DEPUPDATE_LOG_FORMAT.

    Safe to call more than once: previously installed console handlers are
    replaced rather than duplicated.
    """
    level_name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    fmt = os.environ.get(Constants.ENV_LOG_FORMAT, LogFormats.HUMAN.value).lower()

    handler = logging.StreamHandler(stream)
    if fmt == LogFormats.JSON.value:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler.set_name("depupdate-console")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "depupdate-console":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by this logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an `extra` mapping for structured logs, dropping empty values."""
    return {key: value for key, value in fields.items() if value is not None}


def redact(text: str) -> str:
    """Mask bearer tokens and session ids inside free text."""
    if not text:
        return text
    text = _BEARER_RE.sub(r"\1[REDACTED]", text)
    return _SESSION_ID_RE.sub("[REDACTED]", text)


def safe_url(url: str) -> str:
    """Return the URL with sensitive query parameters replaced by [REDACTED]."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return redact(url)
    if not parts.query:
        return url
    query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
    cleaned = [
        (key, "[REDACTED]" if key.lower() in SENSITIVE_PARAMS else value)
        for key, value in query
    ]
    return urllib.parse.urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urllib.parse.urlencode(cleaned), parts.fragment)
    )


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
