"""Layered Predicate Scopes

A scope maps predicate names to Predicates and falls back to its parent for
names it does not define. Scopes form a chain rooted at the built-ins:

    builtins <- schema scope <- nested schema scope

Registering a name locally shadows any ancestor definition without touching
the ancestor, so a nested schema can add predicates that its parent never
sees. Scopes are frozen when their schema is built; after that they are
read-only and safe to share between threads.
"""
from __future__ import annotations

from typing import Iterator

from formrules.errors import AppError, Ok, Result, unknown_predicate
from formrules.logging import schema_logger

from .errors import DuplicateRegistrationError, SchemaDefinitionError, UnknownPredicateError
from .predicates import Predicate, PredicateFn, PredicateModule

log = schema_logger()


class PredicateScope:
    """Named predicates visible at one level of a schema tree."""

    def __init__(self, parent: PredicateScope | None = None, *, label: str = "schema"):
        self._parent = parent
        self._label = label
        self._predicates: dict[str, Predicate] = {}
        self._sources: dict[str, str] = {}
        self._frozen = False

    @property
    def parent(self) -> PredicateScope | None:
        return self._parent

    @property
    def label(self) -> str:
        return self._label

    @property
    def frozen(self) -> bool:
        return self._frozen

    def child(self, *, label: str = "schema") -> PredicateScope:
        """New empty scope that falls back to this one."""
        return PredicateScope(parent=self, label=label)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        fn: PredicateFn,
        message: str | None = None,
        *,
        source: str = "inline",
        default_message: str | None = None,
    ) -> Predicate:
        """Define (or shadow) a predicate in this scope."""
        predicate = Predicate.define(name, fn, message=message, default_message=default_message)
        self.add(predicate, source=source)
        return predicate

    def add(self, predicate: Predicate, *, source: str = "inline") -> None:
        """Add an already-built predicate.

        A later registration from a different source wins; the same source
        registering a name twice is a declaration mistake.
        """
        if self._frozen:
            raise SchemaDefinitionError.frozen(predicate.name)
        if self._sources.get(predicate.name) == source:
            raise DuplicateRegistrationError(predicate.name, source)

        shadowed = predicate.name in self._predicates
        self._predicates[predicate.name] = predicate
        self._sources[predicate.name] = source
        if source != "builtins":
            log.debug("predicate_registered", predicate=predicate.name, source=source,
                scope=self._label, shadowed=shadowed)

    def include(self, module: PredicateModule) -> None:
        """Merge every predicate of a module, using the module name as source."""
        for predicate in module:
            self.add(predicate, source=module.name)
        log.debug("predicate_module_included", module=module.name, predicates=module.names(), scope=self._label)

    def freeze(self) -> None:
        self._frozen = True

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> Result[Predicate, AppError]:
        """Find a predicate in this scope or its ancestors."""
        scope: PredicateScope | None = self
        while scope is not None:
            if name in scope._predicates:
                return Ok(scope._predicates[name])
            scope = scope._parent
        return unknown_predicate(name, origin=self._label)

    def resolve(self, name: str) -> Predicate:
        """Like lookup, but raises UnknownPredicateError for undefined names."""
        result = self.lookup(name)
        if result.is_err():
            raise UnknownPredicateError(name, result.unwrap_err())
        return result.unwrap()

    def source_of(self, name: str) -> str | None:
        """Which source registered the visible definition of `name`."""
        scope: PredicateScope | None = self
        while scope is not None:
            if name in scope._sources:
                return scope._sources[name]
            scope = scope._parent
        return None

    def defines(self, name: str) -> bool:
        """Whether this scope itself (not an ancestor) defines `name`."""
        return name in self._predicates

    def names(self) -> list[str]:
        """All visible names, nearest definitions first."""
        seen: dict[str, None] = {}
        scope: PredicateScope | None = self
        while scope is not None:
            for name in scope._predicates:
                seen.setdefault(name, None)
            scope = scope._parent
        return list(seen)

    def __contains__(self, name: str) -> bool:
        return self.lookup(name).is_ok()

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        return f"PredicateScope({self._label!r}, local={list(self._predicates)!r}, frozen={self._frozen})"
