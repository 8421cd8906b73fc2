"""
Tests for structured logging and request correlation.
"""

import json
import logging

from diaryquest.core.logging import (
    JsonFormatter,
    PrettyFormatter,
    RequestIdFilter,
    _safe_truncate,
    latency_bucket_ms,
    log_event,
    request_id_ctx_var,
)


def _record(msg="stats.recomputed", **extra):
    record = logging.LogRecord("diaryquest", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_filter_injects_context_request_id():
    token = request_id_ctx_var.set("rid-1")
    try:
        record = _record()
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx_var.reset(token)
    assert record.request_id == "rid-1"


def test_filter_keeps_explicit_request_id():
    record = _record(request_id="explicit")
    RequestIdFilter().filter(record)
    assert record.request_id == "explicit"


def test_json_formatter_includes_extra_fields():
    payload = json.loads(JsonFormatter().format(_record(request_id="r", entries=3, current_streak=2)))
    assert payload["message"] == "stats.recomputed"
    assert payload["request_id"] == "r"
    assert payload["entries"] == 3
    assert payload["current_streak"] == 2
    assert payload["level"] == "INFO"


def test_pretty_formatter_renders_fields():
    line = PrettyFormatter().format(_record(request_id="r", day="2024-01-01"))
    assert "[rid=r]" in line
    assert "day=2024-01-01" in line


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5) == "<10ms"
    assert latency_bucket_ms(250) == "100-500ms"
    assert latency_bucket_ms(5000) == ">=1000ms"


def test_log_event_truncates_extra(caplog):
    with caplog.at_level(logging.INFO, logger="diaryquest"):
        log_event("info", "snapshot.imported", entry_id="e-1", extra={"note": "x" * 600})
    record = caplog.records[-1]
    assert record.entry_id == "e-1"
    assert record.note.endswith("...<truncated>")
    assert _safe_truncate("short") == "short"
