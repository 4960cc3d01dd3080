"""Error Values

The error code taxonomy, the immutable AppError value that describes every
failure the engine knows about, and a small Result type (Ok | Err) for the
operations that report failures as values instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Generic, NoReturn, TypeVar, Union, final
from uuid import uuid4

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound="AppError")

_CATEGORIES = {2: "validation", 6: "resource", 7: "schema", 9: "internal"}


class ErrorCode(Enum):
    """Error code taxonomy, grouped by thousands.

    E2xxx: Input validation failures (ordinary data, never raised)
    E6xxx: Resource errors (message files, translation files)
    E7xxx: Schema definition defects (raised at build time)
    E9xxx: Internal/Unknown errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001

    # Resource (E6xxx)
    E6000_RESOURCE_GENERIC = 6000
    E6001_FILE_NOT_FOUND = 6001
    E6002_FILE_READ_ERROR = 6002
    E6004_INVALID_MESSAGE_FILE = 6004

    # Schema definition (E7xxx)
    E7000_SCHEMA_GENERIC = 7000
    E7001_UNKNOWN_PREDICATE = 7001
    E7002_DUPLICATE_REGISTRATION = 7002
    E7003_INVALID_PREDICATE_ARGUMENTS = 7003
    E7004_SCHEMA_FROZEN = 7004
    E7005_DUPLICATE_FIELD = 7005
    E7010_MISSING_MESSAGE = 7010

    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001

    @property
    def category(self) -> str:
        return _CATEGORIES.get(self.value // 1000, "internal")

    @property
    def is_defect(self) -> bool:
        """True for anything but input validation: a bug or bad configuration."""
        return self.category != "validation"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Where and when an error was created."""
    origin: str = ""
    correlation_id: str = field(default_factory=lambda: uuid4().hex[:8])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class AppError:
    """A failure described as data: code, text, context and free-form metadata.

    Exceptions in formrules.validation.errors wrap one of these; Validator.parse
    returns one inside Err.
    """
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    @property
    def error_id(self) -> str:
        return f"{self.code.name}:{self.context.correlation_id}"

    def with_metadata(self, **kwargs: Any) -> AppError:
        return replace(self, metadata={**self.metadata, **kwargs})

    def chain(self, cause: Exception) -> AppError:
        return replace(self, cause=cause)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "code": self.code.name,
            "category": self.code.category,
            "message": self.message,
            "origin": self.context.origin,
            "correlation_id": self.context.correlation_id,
            "timestamp": self.context.timestamp.isoformat(),
            "metadata": self.metadata,
        }
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message}"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ValueError(f"unwrap_err() on Ok({self.value!r})")

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return f(self.value)


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure carrying an AppError. map and and_then pass it through untouched."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        return self

    def and_then(self, f: Callable[[Any], Any]) -> Err[E]:
        return self


Result = Union[Ok[T], Err[E]]
