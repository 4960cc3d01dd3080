"""Rule Expressions

A rule is an immutable tree of predicate references joined by OR and AND:

    rule("url?") | rule("email?")
    rule("int?") & rule("gt?", 18, message="not old enough")

Expressions only hold names. They are bound to a PredicateScope when they
are evaluated, so the same shape can resolve differently in different nested
schemas. `check` verifies every name and argument count against a scope and
is run once when the schema is built.

Evaluation is eager: both sides of a combinator are always evaluated so
every failing leaf can contribute its message.
- OR failing: one message, the branch messages joined by " or "
- AND failing: each branch message as its own entry
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Iterator

from .errors import InvalidPredicateArgumentsError
from .messages import MessageResolver
from .scope import PredicateScope

OR_CONNECTOR = " or "


@dataclass(frozen=True, slots=True)
class RuleResult:
    """Outcome of evaluating an expression against one value.

    origins[i] identifies the leaf (or joined OR branch) behind messages[i].
    A leaf evaluated twice reports once; different leaves sharing a text
    both report.
    """
    passed: bool
    messages: tuple[str, ...] = ()
    origins: tuple[Hashable, ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def success(cls) -> RuleResult:
        return cls(passed=True)

    @classmethod
    def failure(cls, *messages: str) -> RuleResult:
        return cls.from_entries((message, message) for message in messages)

    @classmethod
    def from_entries(cls, entries: Iterable[tuple[Hashable, str]]) -> RuleResult:
        """Failure from (origin, message) pairs, keeping the first per origin."""
        unique: dict[Hashable, str] = {}
        for origin, message in entries:
            unique.setdefault(origin, message)
        return cls(passed=False, messages=tuple(unique.values()), origins=tuple(unique))

    def entries(self) -> Iterator[tuple[Hashable, str]]:
        return zip(self.origins, self.messages)


@dataclass(frozen=True, slots=True)
class EvaluationContext:
    """Everything a leaf needs to test a value and describe a failure."""
    scope: PredicateScope
    resolver: MessageResolver
    locale: str | None = None


class RuleExpression(ABC):
    """Base class for rule tree nodes.

    Combine with operators:
    - & (AND): both must pass, each failure reported separately
    - | (OR): at least one must pass, failures joined into one message
    """

    @abstractmethod
    def evaluate(self, value: Any, context: EvaluationContext) -> RuleResult:
        """Test a value. Predicate exceptions propagate to the caller."""

    @abstractmethod
    def leaves(self) -> Iterator[Leaf]:
        """Leaves in left-to-right order."""

    def check(self, scope: PredicateScope) -> None:
        """Resolve every leaf in `scope`; raise on unknown names or bad arity."""
        for leaf in self.leaves():
            predicate = scope.resolve(leaf.name)
            if not predicate.accepts(len(leaf.args)):
                expected = predicate.required_args if predicate.variadic else len(predicate.arg_names)
                raise InvalidPredicateArgumentsError(leaf.name, expected, len(leaf.args))

    def predicate_names(self) -> list[str]:
        return list(dict.fromkeys(leaf.name for leaf in self.leaves()))

    def __and__(self, other: RuleExpression) -> And:
        return And(self, other)

    def __or__(self, other: RuleExpression) -> Or:
        return Or(self, other)


@dataclass(frozen=True, slots=True)
class Leaf(RuleExpression):
    """Reference to a named predicate, with arguments and an inline message."""
    name: str
    args: tuple[Any, ...] = ()
    message: str | None = None

    def evaluate(self, value: Any, context: EvaluationContext) -> RuleResult:
        if context.scope.resolve(self.name).evaluate(value, *self.args):
            return RuleResult.success()
        message = context.resolver.resolve(
            self.name, self.message, context.locale, context.scope, args=self.args, value=value)
        return RuleResult.from_entries([(self.origin, message)])

    @property
    def origin(self) -> Hashable:
        return (self.name, repr(self.args), self.message)

    def leaves(self) -> Iterator[Leaf]:
        yield self

    def __str__(self) -> str:
        args = ", ".join(repr(a) for a in self.args)
        return f"{self.name}({args})" if args else self.name


@dataclass(frozen=True, slots=True)
class Or(RuleExpression):
    """Passes when either side passes."""
    left: RuleExpression
    right: RuleExpression

    def evaluate(self, value: Any, context: EvaluationContext) -> RuleResult:
        left, right = self.left.evaluate(value, context), self.right.evaluate(value, context)
        if left.passed or right.passed:
            return RuleResult.success()
        branches = RuleResult.from_entries([*left.entries(), *right.entries()])
        return RuleResult.from_entries([(branches.origins, OR_CONNECTOR.join(branches.messages))])

    def leaves(self) -> Iterator[Leaf]:
        yield from self.left.leaves()
        yield from self.right.leaves()

    def __str__(self) -> str:
        return f"({self.left} | {self.right})"


@dataclass(frozen=True, slots=True)
class And(RuleExpression):
    """Passes when both sides pass."""
    left: RuleExpression
    right: RuleExpression

    def evaluate(self, value: Any, context: EvaluationContext) -> RuleResult:
        left, right = self.left.evaluate(value, context), self.right.evaluate(value, context)
        if left.passed and right.passed:
            return RuleResult.success()
        return RuleResult.from_entries([*left.entries(), *right.entries()])

    def leaves(self) -> Iterator[Leaf]:
        yield from self.left.leaves()
        yield from self.right.leaves()

    def __str__(self) -> str:
        return f"({self.left} & {self.right})"


def rule(name: str, *args: Any, message: str | None = None) -> Leaf:
    """Reference a predicate by name.

    Usage:
        rule("format?", r"Frank")
        rule("adult?", message="not old enough")
    """
    return Leaf(name, tuple(args), message)
