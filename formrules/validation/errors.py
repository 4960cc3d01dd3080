"""Configuration Defect Exceptions

Invalid user input is never raised: it is reported as data in
ValidationResult.messages. The exceptions below signal defects in how a
schema was declared or configured, and surface at build time, long before
any input is processed.

Every exception wraps the AppError describing it:

    try:
        builder.build()
    except UnknownPredicateError as exc:
        log.error(exc.error.message, code=exc.error.code.name)
"""
from __future__ import annotations

from formrules.errors import (
    AppError,
    duplicate_field,
    duplicate_registration,
    invalid_predicate_arguments,
    message_file_error,
    missing_message,
    schema_frozen,
    unknown_predicate,
    ErrorCode,
)


class FormRulesError(Exception):
    """Exception wrapper for AppError."""

    def __init__(self, error: AppError):
        self.error = error
        super().__init__(error.message)


class SchemaDefinitionError(FormRulesError):
    """A schema or scope was declared incorrectly."""

    @classmethod
    def frozen(cls, name: str) -> SchemaDefinitionError:
        return cls(schema_frozen(name, origin="scope").unwrap_err())

    @classmethod
    def duplicate_field(cls, name: str) -> SchemaDefinitionError:
        return cls(duplicate_field(name, origin="schema").unwrap_err())


class UnknownPredicateError(SchemaDefinitionError):
    """A rule references a predicate name no scope in the chain defines."""

    def __init__(self, name: str, error: AppError | None = None):
        self.name = name
        super().__init__(error or unknown_predicate(name, origin="scope").unwrap_err())


class DuplicateRegistrationError(SchemaDefinitionError):
    """The same source registered one predicate name twice."""

    def __init__(self, name: str, source: str):
        self.name, self.source = name, source
        super().__init__(duplicate_registration(name, source, origin="scope").unwrap_err())


class InvalidPredicateArgumentsError(SchemaDefinitionError):
    """A rule passes the wrong number of arguments to a predicate."""

    def __init__(self, name: str, expected: int, given: int):
        self.name, self.expected, self.given = name, expected, given
        super().__init__(invalid_predicate_arguments(name, expected, given, origin="rules").unwrap_err())


class MissingMessageError(FormRulesError):
    """No message source produced text for a failing predicate."""

    def __init__(self, name: str, locale: str):
        self.name, self.locale = name, locale
        super().__init__(missing_message(name, locale, origin="messages").unwrap_err())


class MessageFileError(FormRulesError):
    """A message or translation file is missing or malformed."""

    def __init__(self, path: str, reason: str, *, missing: bool = False, cause: Exception | None = None):
        self.path = path
        code = ErrorCode.E6001_FILE_NOT_FOUND if missing else ErrorCode.E6004_INVALID_MESSAGE_FILE
        super().__init__(message_file_error(path, reason, code=code, origin="messages", cause=cause).unwrap_err())
