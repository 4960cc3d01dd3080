"""Domain-Specific Error Builders

Ergonomic constructors for typed errors. Each builder creates an AppError
with the appropriate code and context, wrapped in Err.
"""
from typing import Any

from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Validation Errors (E2xxx)
# =============================================================================

def validation_failed(
    messages: dict[str, Any],
    *,
    origin: str = "",
) -> Err[AppError]:
    """Input did not satisfy its schema. Carries the nested message tree."""
    return Err(AppError(
        code=ErrorCode.E2000_VALIDATION_GENERIC,
        message=f"Validation failed for: {', '.join(messages) or 'input'}",
        context=ErrorContext(origin=origin),
        metadata={"messages": messages},
    ))


# =============================================================================
# Resource Errors (E6xxx)
# =============================================================================

def message_file_error(
    path: str,
    reason: str,
    *,
    code: ErrorCode = ErrorCode.E6004_INVALID_MESSAGE_FILE,
    origin: str = "",
    cause: Exception | None = None,
) -> Err[AppError]:
    return Err(AppError(
        code=code,
        message=f"Cannot load messages from '{path}': {reason}",
        context=ErrorContext(origin=origin),
        metadata={"path": path},
        cause=cause,
    ))


# =============================================================================
# Schema Definition Errors (E7xxx)
# =============================================================================

def schema_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E7000_SCHEMA_GENERIC,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create schema definition error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in metadata.items() if v is not None},
    ))


def unknown_predicate(name: str, origin: str = "") -> Err[AppError]:
    return schema_error(
        f"+{name}+ is not a valid predicate name",
        code=ErrorCode.E7001_UNKNOWN_PREDICATE,
        origin=origin,
        predicate=name,
    )


def duplicate_registration(name: str, source: str, origin: str = "") -> Err[AppError]:
    return schema_error(
        f"Predicate '{name}' is already registered by '{source}'",
        code=ErrorCode.E7002_DUPLICATE_REGISTRATION,
        origin=origin,
        predicate=name,
        source=source,
    )


def invalid_predicate_arguments(
    name: str, expected: int, given: int, origin: str = ""
) -> Err[AppError]:
    return schema_error(
        f"Predicate '{name}' expects {expected} argument(s), got {given}",
        code=ErrorCode.E7003_INVALID_PREDICATE_ARGUMENTS,
        origin=origin,
        predicate=name,
        expected=expected,
        given=given,
    )


def schema_frozen(name: str, origin: str = "") -> Err[AppError]:
    return schema_error(
        f"Cannot register '{name}': scope is frozen",
        code=ErrorCode.E7004_SCHEMA_FROZEN,
        origin=origin,
        predicate=name,
    )


def duplicate_field(name: str, origin: str = "") -> Err[AppError]:
    return schema_error(
        f"Field '{name}' is already declared",
        code=ErrorCode.E7005_DUPLICATE_FIELD,
        origin=origin,
        field=name,
    )


def missing_message(name: str, locale: str, origin: str = "") -> Err[AppError]:
    return schema_error(
        f"No message for predicate '{name}' (locale '{locale}')",
        code=ErrorCode.E7010_MISSING_MESSAGE,
        origin=origin,
        predicate=name,
        locale=locale,
    )
