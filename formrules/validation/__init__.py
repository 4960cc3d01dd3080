"""Declarative Validation Engine

Named predicates are combined into rule expressions, attached to fields of a
schema, and evaluated against input records. Failures come back as a tree of
human-readable messages.

Key Features:
- Built-in predicates in a root scope; inline and module-supplied custom predicates
- OR/AND combinators with deterministic message composition
- Nested schemas with their own, inward-only predicate scopes
- Message resolution: inline > registered > message file / i18n > built-in default
- Configuration defects raised at build time, input failures returned as data

Usage:
    from formrules.validation import SchemaBuilder, Validator, rule

    builder = SchemaBuilder()
    builder.predicate("url?", lambda v: v.startswith("http"), message="must be an URL")
    builder.required("foo", rule("url?") | rule("email?"))

    result = Validator(builder).validate({"foo": "test"})
    result.messages  # {"foo": ["must be an URL or must be an email"]}
"""
from .predicates import Predicate, PredicateModule
from .scope import PredicateScope
from .builtins import builtin_predicates, builtin_scope
from .messages import (
    CatalogI18n,
    I18nLookup,
    MessageCatalog,
    MessageConfig,
    MessageResolver,
    MessagesMode,
    YamlI18n,
    default_i18n,
    load_messages,
    render,
)
from .rules import And, EvaluationContext, Leaf, Or, RuleExpression, RuleResult, rule
from .schema import FieldRule, SchemaBuilder, SchemaNode
from .validator import FieldFailure, ValidationResult, Validator
from .errors import (
    DuplicateRegistrationError,
    FormRulesError,
    InvalidPredicateArgumentsError,
    MessageFileError,
    MissingMessageError,
    SchemaDefinitionError,
    UnknownPredicateError,
)

__all__ = [
    # Predicates
    "Predicate",
    "PredicateModule",
    "PredicateScope",
    "builtin_predicates",
    "builtin_scope",
    # Messages
    "CatalogI18n",
    "I18nLookup",
    "MessageCatalog",
    "MessageConfig",
    "MessageResolver",
    "MessagesMode",
    "YamlI18n",
    "default_i18n",
    "load_messages",
    "render",
    # Rules
    "RuleExpression",
    "RuleResult",
    "EvaluationContext",
    "Leaf",
    "Or",
    "And",
    "rule",
    # Schemas
    "FieldRule",
    "SchemaBuilder",
    "SchemaNode",
    # Validation
    "Validator",
    "ValidationResult",
    "FieldFailure",
    # Errors
    "FormRulesError",
    "SchemaDefinitionError",
    "UnknownPredicateError",
    "DuplicateRegistrationError",
    "InvalidPredicateArgumentsError",
    "MissingMessageError",
    "MessageFileError",
]
