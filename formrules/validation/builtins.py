"""Built-in Predicates

Preloaded into the root scope, which is the ultimate parent of every schema
scope. Each predicate tolerates any input type: a value of the wrong type
simply fails the test instead of raising, so combinations such as
`rule("int?") | rule("str?")` are always safe to evaluate.

Default messages are plain templates. `{name}` placeholders are bound to the
predicate arguments, `{input}` to the tested value. Message files and i18n
catalogs override them per locale.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sized
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable
from urllib.parse import urlparse
from uuid import UUID as StdUUID

from .predicates import Predicate
from .scope import PredicateScope

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
URL_SCHEMES = frozenset({"http", "https"})

_BUILTINS: dict[str, Predicate] = {}


def builtin(name: str, default_message: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator adding a function to the built-in predicate table."""
    def register(fn: Callable[..., Any]) -> Callable[..., Any]:
        _BUILTINS[name] = Predicate.define(name, fn, default_message=default_message)
        return fn
    return register


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


# ============================================================================
# Presence
# ============================================================================

@builtin("key?", "is missing")
def _key(value: Any) -> bool:
    # Field presence is decided by the validator; reaching the test means present
    return True


@builtin("none?", "cannot be defined")
def _none(value: Any) -> bool:
    return value is None


@builtin("empty?", "must be empty")
def _empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


@builtin("filled?", "must be filled")
def _filled(value: Any) -> bool:
    return not _empty(value)


# ============================================================================
# Types
# ============================================================================

@builtin("str?", "must be a string")
def _str(value: Any) -> bool:
    return isinstance(value, str)


@builtin("int?", "must be an integer")
def _int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@builtin("float?", "must be a float")
def _float(value: Any) -> bool:
    return isinstance(value, float)


@builtin("decimal?", "must be a decimal")
def _decimal(value: Any) -> bool:
    return isinstance(value, Decimal)


@builtin("bool?", "must be boolean")
def _bool(value: Any) -> bool:
    return isinstance(value, bool)


@builtin("hash?", "must be a hash")
def _hash(value: Any) -> bool:
    return isinstance(value, Mapping)


@builtin("array?", "must be an array")
def _array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


@builtin("date?", "must be a date")
def _date(value: Any) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


@builtin("date_time?", "must be a date time")
def _date_time(value: Any) -> bool:
    return isinstance(value, datetime)


@builtin("true?", "must be true")
def _true(value: Any) -> bool:
    return value is True


@builtin("false?", "must be false")
def _false(value: Any) -> bool:
    return value is False


# ============================================================================
# Equality and Inclusion
# ============================================================================

@builtin("eql?", "must be equal to {left}")
def _eql(value: Any, left: Any) -> bool:
    return value == left


@builtin("not_eql?", "must not be equal to {left}")
def _not_eql(value: Any, left: Any) -> bool:
    return value != left


@builtin("included_in?", "must be one of: {list}")
def _included_in(value: Any, list: Any) -> bool:
    try:
        return value in list
    except TypeError:
        return False


@builtin("excluded_from?", "must not be one of: {list}")
def _excluded_from(value: Any, list: Any) -> bool:
    try:
        return value not in list
    except TypeError:
        return False


# ============================================================================
# Numeric
# ============================================================================

@builtin("gt?", "must be greater than {num}")
def _gt(value: Any, num: Any) -> bool:
    return _is_number(value) and value > num


@builtin("gteq?", "must be greater than or equal to {num}")
def _gteq(value: Any, num: Any) -> bool:
    return _is_number(value) and value >= num


@builtin("lt?", "must be less than {num}")
def _lt(value: Any, num: Any) -> bool:
    return _is_number(value) and value < num


@builtin("lteq?", "must be less than or equal to {num}")
def _lteq(value: Any, num: Any) -> bool:
    return _is_number(value) and value <= num


@builtin("odd?", "must be odd")
def _odd(value: Any) -> bool:
    return _int(value) and value % 2 == 1


@builtin("even?", "must be even")
def _even(value: Any) -> bool:
    return _int(value) and value % 2 == 0


# ============================================================================
# Size
# ============================================================================

@builtin("size?", "size must be {size}")
def _size(value: Any, size: Any) -> bool:
    if not isinstance(value, Sized):
        return False
    if isinstance(size, range):
        return len(value) in size
    return len(value) == size


@builtin("min_size?", "size cannot be less than {num}")
def _min_size(value: Any, num: int) -> bool:
    return isinstance(value, Sized) and len(value) >= num


@builtin("max_size?", "size cannot be greater than {num}")
def _max_size(value: Any, num: int) -> bool:
    return isinstance(value, Sized) and len(value) <= num


# ============================================================================
# Formats
# ============================================================================

@builtin("format?", "is in invalid format")
def _format(value: Any, regex: Any) -> bool:
    if not isinstance(value, str):
        return False
    return re.search(regex, value) is not None


@builtin("email?", "must be an email")
def _email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


@builtin("url?", "must be an URL")
def _url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in URL_SCHEMES and bool(parsed.netloc)


@builtin("uuid?", "must be a valid UUID")
def _uuid(value: Any) -> bool:
    if isinstance(value, StdUUID):
        return True
    if not isinstance(value, str):
        return False
    try:
        StdUUID(value)
    except ValueError:
        return False
    return True


def builtin_predicates() -> list[Predicate]:
    """All built-in predicates, in declaration order."""
    return list(_BUILTINS.values())


@lru_cache
def builtin_scope() -> PredicateScope:
    """The frozen root scope holding every built-in predicate."""
    scope = PredicateScope(label="builtins")
    for predicate in _BUILTINS.values():
        scope.add(predicate, source="builtins")
    scope.freeze()
    return scope
