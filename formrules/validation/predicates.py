"""Named Predicates

A predicate is a pure boolean test over one input value, optionally
parameterised by arguments supplied at the rule site:

    format = Predicate.define("format?", lambda value, regex: ..., default_message="is in invalid format")
    format.evaluate("Frank", re.compile("Frank"))  # True

Predicates are immutable values. Registration happens on a PredicateScope
or, for reusable bundles, on a PredicateModule that is later included into
a scope.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from .errors import DuplicateRegistrationError

PredicateFn = Callable[..., Any]


def _signature_shape(fn: PredicateFn) -> tuple[tuple[str, ...], int, bool]:
    """Argument names after the input value, required count, variadic flag."""
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return (), 0, True

    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    variadic = any(p.kind is p.VAR_POSITIONAL for p in params)
    extra = positional[1:]
    required = sum(1 for p in extra if p.default is p.empty)
    return tuple(p.name for p in extra), required, variadic


@dataclass(frozen=True, slots=True)
class Predicate:
    """A named boolean test plus the messages shown when it fails.

    - message: registered alongside the predicate; outranks message files
    - default_message: built-in template; used when nothing else matches
    """
    name: str
    fn: PredicateFn
    message: str | None = None
    default_message: str | None = None
    arg_names: tuple[str, ...] = ()
    required_args: int = 0
    variadic: bool = False

    @classmethod
    def define(
        cls,
        name: str,
        fn: PredicateFn,
        *,
        message: str | None = None,
        default_message: str | None = None,
    ) -> Predicate:
        """Build a predicate, reading its arguments from the function signature."""
        arg_names, required, variadic = _signature_shape(fn)
        return cls(name=name, fn=fn, message=message, default_message=default_message,
            arg_names=arg_names, required_args=required, variadic=variadic)

    def evaluate(self, value: Any, *args: Any) -> bool:
        return bool(self.fn(value, *args))

    def accepts(self, count: int) -> bool:
        """Whether a rule may pass `count` arguments to this predicate."""
        if count < self.required_args:
            return False
        return self.variadic or count <= len(self.arg_names)

    def interpolations(self, args: tuple[Any, ...], value: Any = None) -> dict[str, Any]:
        """Values available to message templates: argument names and `input`."""
        bound = dict(zip(self.arg_names, args))
        bound["input"] = value
        return bound

    def __call__(self, value: Any, *args: Any) -> bool:
        return self.evaluate(value, *args)


class PredicateModule:
    """A reusable bundle of predicates, merged into a scope by `include`.

    Usage:
        contacts = PredicateModule("contacts", messages_path="messages.yml")

        @contacts.predicate("email?")
        def email(value):
            return isinstance(value, str) and "@" in value
    """

    def __init__(self, name: str, *, messages_path: str | None = None):
        self.name = name
        self.messages_path = messages_path
        self._predicates: dict[str, Predicate] = {}

    def predicate(self, name: str, fn: PredicateFn | None = None, *, message: str | None = None):
        """Add a predicate. Works as a plain call or as a decorator."""
        def register(func: PredicateFn) -> PredicateFn:
            if name in self._predicates:
                raise DuplicateRegistrationError(name, self.name)
            self._predicates[name] = Predicate.define(name, func, message=message)
            return func

        if fn is not None:
            register(fn)
            return fn
        return register

    def names(self) -> list[str]:
        return list(self._predicates)

    def __iter__(self) -> Iterator[Predicate]:
        return iter(self._predicates.values())

    def __len__(self) -> int:
        return len(self._predicates)

    def __contains__(self, name: str) -> bool:
        return name in self._predicates

    def __repr__(self) -> str:
        return f"PredicateModule({self.name!r}, predicates={self.names()!r})"
