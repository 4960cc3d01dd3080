"""
Tests for structured logging output.
"""
import io
import json
import logging

import pytest

from formrules.logging import MAX_VALUE_LENGTH, configure_logging
from formrules.validation import SchemaBuilder, Validator, rule


@pytest.fixture
def captured():
    """Route formrules debug events as JSON into a buffer."""
    stream = io.StringIO()
    configure_logging("DEBUG", json_logs=True, stream=stream)
    yield lambda: [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]
    configure_logging("WARNING")


def _events(records, name):
    return [r for r in records if r["event"] == name]


class TestLogging:
    """Events emitted while building and validating."""

    def test_schema_built_event(self, captured):
        SchemaBuilder().required("foo", rule("str?")).build()
        (event,) = _events(captured(), "schema_built")
        assert event["schema"] == "root"
        assert event["fields"] == ["foo"]
        assert event["library"] == "formrules"
        assert event["logger"] == "formrules.schema"

    def test_validation_events_carry_context(self, captured):
        Validator(SchemaBuilder().required("foo", rule("str?"))).validate({"foo": 1}, locale="it")
        (event,) = _events(captured(), "validation_completed")
        assert event["schema"] == "root"
        assert event["locale"] == "it"
        assert event["success"] is False
        assert event["failed_fields"] == ["foo"]

    def test_context_does_not_leak_between_runs(self, captured):
        Validator(SchemaBuilder().required("foo", rule("str?"))).validate({"foo": "x"})
        SchemaBuilder().required("bar", rule("int?")).build()
        records = captured()
        assert "locale" not in _events(records, "schema_built")[-1]

    def test_long_values_are_clipped(self, captured):
        builder = SchemaBuilder()
        builder.predicate("x" * (MAX_VALUE_LENGTH + 50) + "?", lambda value: True, message="x")
        (event,) = _events(captured(), "predicate_registered")
        assert event["predicate"].endswith("...")
        assert len(event["predicate"]) == MAX_VALUE_LENGTH + 3

    def test_root_logger_untouched(self, captured):
        root_handlers = list(logging.getLogger().handlers)
        configure_logging("INFO")
        assert logging.getLogger().handlers == root_handlers
        assert not logging.getLogger("formrules").propagate
