"""Unit tests for shared logging helpers."""

import io
import json
import logging

from common.logging_utils import (
    JsonFormatter,
    Timer,
    configure_logging,
    extra_context,
    redact,
    safe_url,
)
from constants import Constants


def test_extra_context_drops_none():
    assert extra_context(event="x", target=None, count=0) == {"event": "x", "count": 0}


def test_safe_url_redacts_tokens():
    url = safe_url("https://x.test/path?q=SELECT+Id&access_token=abc123")
    assert "abc123" not in url
    assert "q=SELECT+Id" in url


def test_safe_url_without_query_unchanged():
    assert safe_url("https://x.test/a") == "https://x.test/a"


def test_redact_bearer_and_session_id():
    text = redact("Authorization: Bearer abc.def and 00D000000000001!AQEAQH.xyz")
    assert "abc.def" not in text
    assert "AQEAQH" not in text


def test_json_formatter_includes_extra_fields():
    record = logging.makeLogRecord({"name": "t", "levelname": "INFO", "msg": "hello %s", "args": ("you",)})
    record.event = "http_request"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello you"
    assert payload["event"] == "http_request"


def test_configure_logging_does_not_duplicate_handlers(monkeypatch):
    monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "warning")
    stream = io.StringIO()
    configure_logging(stream)
    configure_logging(stream)

    root = logging.getLogger()
    ours = [h for h in root.handlers if h.get_name() == "depupdate-console"]
    assert len(ours) == 1
    assert root.level == logging.WARNING
    logging.getLogger("x").warning("visible")
    assert "[WARNING] visible" in stream.getvalue()
    root.removeHandler(ours[0])
    root.setLevel(logging.WARNING)


def test_timer_measures():
    with Timer() as t:
        pass
    assert t.duration_ms() >= 0
