"""Structured Logging — verifies JSON output, extra fields and idempotent setup."""

import json
import logging

from orbit.core.domain_types import Decision
from orbit.infrastructure.audit import LoggingAuditSink
from orbit.infrastructure.observability import JSONFormatter, setup_logging


def test_json_formatter_surfaces_extra_fields():
    record = logging.LogRecord(
        "orbit.audit", logging.WARNING, __file__, 1, "Gateway decision", None, None,
    )
    record.subject_id = "abc"
    record.decision = "deny_forbidden"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["subject_id"] == "abc"
    assert payload["decision"] == "deny_forbidden"
    assert "role" not in payload


def test_setup_logging_is_idempotent():
    setup_logging("INFO", "json")
    setup_logging("DEBUG", "text")
    named = [h for h in logging.root.handlers if h.get_name() == "orbit-root"]
    assert len(named) == 1
    assert logging.root.level == logging.DEBUG

    logging.root.removeHandler(named[0])
    logging.root.setLevel(logging.WARNING)


def test_audit_sink_levels(caplog):
    sink = LoggingAuditSink()
    with caplog.at_level(logging.INFO, logger="orbit.audit"):
        sink.record("abc", "STUDENT", Decision.ALLOW)
        sink.record(None, None, Decision.DENY_MISSING_TOKEN)

    levels = [r.levelno for r in caplog.records if r.name == "orbit.audit"]
    assert levels == [logging.INFO, logging.WARNING]
    assert caplog.records[-1].decision == "deny_missing_token"
