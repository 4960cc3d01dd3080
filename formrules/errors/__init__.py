"""Monadic Error Handling System

Typed error values shared by the engine:
- Result[T, E]: Monadic container for success/failure
- AppError: Error value with code, message, context and metadata
- ErrorCode: Hierarchical error code taxonomy
- Builder functions: Ergonomic error construction

Usage:
    from formrules.errors import Ok, Err, Result, AppError, unknown_predicate

    def lookup(name: str) -> Result[Predicate, AppError]:
        if name not in table:
            return unknown_predicate(name, origin="scope")
        return Ok(table[name])
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
)

from .builders import (
    validation_failed,
    message_file_error,
    schema_error,
    unknown_predicate,
    duplicate_registration,
    invalid_predicate_arguments,
    schema_frozen,
    duplicate_field,
    missing_message,
)

__all__ = [
    # Core types
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    # Validation (E2xxx)
    "validation_failed",
    # Resource (E6xxx)
    "message_file_error",
    # Schema (E7xxx)
    "schema_error",
    "unknown_predicate",
    "duplicate_registration",
    "invalid_predicate_arguments",
    "schema_frozen",
    "duplicate_field",
    "missing_message",
]
