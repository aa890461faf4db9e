"""Structured Logging - tests for the JSON formatter and error extras."""

import json
import logging

from trackref.core.errors import IssueNotFoundError
from trackref.infrastructure.observability import JSONFormatter, error_extra


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("trackref.test", logging.WARNING, __file__, 1, "hello", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_known_extras():
    payload = json.loads(JSONFormatter().format(
        _record(tool_name="get_issue", project="TEST", unrelated="x"),
    ))
    assert payload["message"] == "hello"
    assert payload["level"] == "WARNING"
    assert payload["tool_name"] == "get_issue"
    assert payload["project"] == "TEST"
    assert "unrelated" not in payload


def test_error_extra_carries_identifiers():
    extra = error_extra(IssueNotFoundError("TEST-9", "TEST"), "get_issue")
    assert extra == {
        "error_code": "ISSUE_NOT_FOUND", "tool_name": "get_issue",
        "identifier": "TEST-9", "project": "TEST",
    }
