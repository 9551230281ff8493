import json
import logging

from pantry_ledger.logging import JsonLineFormatter, LineContextFilter, line_context


def _record(message="Storage created"):
    return logging.LogRecord("services.inventory", logging.INFO, __file__, 1, message, (), None)


def test_line_context_sets_and_restores_fields():
    record = _record()
    with line_context("add", line_id="line-1") as line_id:
        assert line_id == "line-1"
        with line_context("go"):
            pass
        LineContextFilter().filter(record)
    assert (record.line_id, record.keyword) == ("line-1", "add")

    outside = _record()
    LineContextFilter().filter(outside)
    assert (outside.line_id, outside.keyword) == ("-", "-")


def test_json_formatter_carries_line_and_keyword():
    record = _record()
    with line_context("remove", line_id="abc123"):
        LineContextFilter().filter(record)
    payload = json.loads(JsonLineFormatter().format(record))
    assert payload["line"] == "abc123"
    assert payload["keyword"] == "remove"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "services.inventory"
    assert payload["message"] == "Storage created"
