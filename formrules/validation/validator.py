"""Validation Runs

Validator walks a built SchemaNode over an input record and collects the
failure messages of every field into a tree shaped like the schema:

    result = Validator(schema).validate({"foo": "test"})
    result.success      # False
    result.messages     # {"foo": ["must be an URL or must be an email"]}

Invalid input is ordinary data here. Nothing is raised for it; exceptions
only come from defects such as a predicate function that itself raises.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from formrules.errors import AppError, Ok, Result, validation_failed
from formrules.logging import engine_logger, validation_context

from .rules import EvaluationContext
from .schema import FieldRule, SchemaBuilder, SchemaNode

log = engine_logger()

PRESENCE_PREDICATE = "key?"
MAPPING_PREDICATE = "hash?"

Messages = dict[str, Any]


@dataclass(frozen=True, slots=True)
class FieldFailure:
    """One failure message with the dotted path of its field."""
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.path, "message": self.message}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one input record.

    messages: field name -> list of messages, or -> nested mapping for nested
    schemas. Fields that passed, and optional fields that were absent, have
    no entry.
    """
    messages: Messages = field(default_factory=dict)
    output: Mapping[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return _all_empty(self.messages)

    def failures(self) -> list[FieldFailure]:
        """Flatten messages into (path, message) pairs in schema order."""
        return list(_flatten(self.messages, ""))

    def messages_for(self, path: str) -> list[str] | Messages:
        """Messages at a dotted path such as `details.foo`; empty if it passed."""
        node: Any = self.messages
        for part in path.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return []
            node = node[part]
        return node

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "messages": self.messages}

    def __bool__(self) -> bool:
        return self.success


def _all_empty(messages: Mapping[str, Any]) -> bool:
    for entry in messages.values():
        if isinstance(entry, Mapping):
            if not _all_empty(entry):
                return False
        elif entry:
            return False
    return True


def _flatten(messages: Mapping[str, Any], prefix: str):
    for name, entry in messages.items():
        path = f"{prefix}.{name}" if prefix else name
        if isinstance(entry, Mapping):
            yield from _flatten(entry, path)
        else:
            for message in entry:
                yield FieldFailure(path, message)


class Validator:
    """Validates input records against one schema.

    The schema is immutable once built, so a Validator can be shared and
    called concurrently.
    """

    def __init__(self, schema: SchemaNode | SchemaBuilder):
        self.schema = schema.build() if isinstance(schema, SchemaBuilder) else schema

    def validate(self, data: Mapping[str, Any], *, locale: str | None = None) -> ValidationResult:
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping as input, got {type(data).__name__}")
        with validation_context(schema=self.schema.scope.label, locale=locale or self.schema.messages.locale):
            messages = self._validate_node(self.schema, data, locale)
            result = ValidationResult(messages=messages, output=data)
            log.debug("validation_completed", success=result.success, failed_fields=list(messages))
        return result

    __call__ = validate

    def parse(self, data: Mapping[str, Any], *, locale: str | None = None) -> Result[Mapping[str, Any], AppError]:
        """Ok(input) when valid, else Err carrying the message tree in metadata."""
        result = self.validate(data, locale=locale)
        if result.success:
            return Ok(result.output)
        return validation_failed(result.messages, origin="validator")

    def _validate_node(self, node: SchemaNode, data: Mapping[str, Any], locale: str | None) -> Messages:
        context = EvaluationContext(scope=node.scope, resolver=node.resolver, locale=locale)
        messages: Messages = {}

        for name, entry in node.fields.items():
            if name not in data:
                if entry.required:
                    messages[name] = [self._message(context, PRESENCE_PREDICATE, None)]
                continue

            value = data[name]
            if isinstance(entry, FieldRule):
                if entry.expression is None:
                    continue
                outcome = entry.expression.evaluate(value, context)
                if not outcome.passed:
                    messages[name] = list(outcome.messages)
            elif not isinstance(value, Mapping):
                messages[name] = [self._message(context, MAPPING_PREDICATE, value)]
            else:
                nested = self._validate_node(entry, value, locale)
                if nested:
                    messages[name] = nested

        return messages

    @staticmethod
    def _message(context: EvaluationContext, predicate: str, value: Any) -> str:
        return context.resolver.resolve(predicate, None, context.locale, context.scope, value=value)
