"""Schema Declaration

Schemas map field names to rules or to nested schemas. Each schema owns a
PredicateScope whose parent is the enclosing schema's scope, so custom
predicates flow inward to nested schemas but never outward.

    builder = SchemaBuilder()
    builder.configure(messages_file="messages.yml")
    builder.predicate("adult?", lambda age: age > 18, message="not old enough")
    builder.required("name", rule("format?", r"Frank"))
    builder.required("age", rule("adult?"))

    with builder.schema("details") as details:
        details.predicate("odd?", lambda n: n % 2 == 1)
        details.required("foo", rule("odd?"))

    schema = builder.build()

`build()` loads message files, checks every rule against its scope and
freezes the tree. An unknown predicate name fails here, before any input
can be validated.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from formrules.config import get_settings
from formrules.logging import schema_logger

from .builtins import builtin_scope
from .errors import SchemaDefinitionError
from .messages import (
    CatalogI18n,
    I18nLookup,
    MessageCatalog,
    MessageConfig,
    MessageLoader,
    MessageResolver,
    MessagesMode,
    default_i18n,
    load_messages,
)
from .predicates import PredicateFn, PredicateModule
from .rules import RuleExpression, rule
from .scope import PredicateScope

log = schema_logger()


@dataclass(frozen=True, slots=True)
class FieldRule:
    """A field checked by one rule expression.

    A rule of None only requires the key to be present.
    """
    name: str
    expression: RuleExpression | None
    required: bool = True


@dataclass(frozen=True, slots=True, eq=False)
class SchemaNode:
    """A group of fields sharing one predicate scope and message config."""
    fields: Mapping[str, FieldRule | SchemaNode]
    scope: PredicateScope
    messages: MessageConfig
    resolver: MessageResolver
    name: str | None = None
    required: bool = True

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __getitem__(self, name: str) -> FieldRule | SchemaNode:
        return self.fields[name]

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"SchemaNode(name={self.name!r}, fields={list(self.fields)!r})"


def _as_expression(expr: RuleExpression | str | None) -> RuleExpression | None:
    if isinstance(expr, str):
        return rule(expr)
    if expr is None or isinstance(expr, RuleExpression):
        return expr
    raise TypeError(f"Expected a rule expression or predicate name, got {type(expr).__name__}")


class SchemaBuilder:
    """Collects field declarations and custom predicates, then builds a SchemaNode."""

    def __init__(
        self,
        *,
        name: str | None = None,
        required: bool = True,
        parent: SchemaBuilder | None = None,
        loader: MessageLoader | None = None,
    ):
        self.name = name
        self.is_required = required
        self._parent = parent
        self._loader = loader or (parent._loader if parent else load_messages)
        label = f"{parent.scope.label}.{name}" if parent else "root"
        self.scope: PredicateScope = (parent.scope if parent else builtin_scope()).child(label=label)
        self._fields: dict[str, FieldRule | SchemaBuilder] = {}
        self._settings: dict[str, Any] = {}
        self._messages_files: list[str] = []
        self._node: SchemaNode | None = None

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def configure(
        self,
        *,
        messages_file: str | None = None,
        mode: MessagesMode | str | None = None,
        locale: str | None = None,
        default_locale: str | None = None,
        i18n: I18nLookup | None = None,
        catalog: MessageCatalog | None = None,
    ) -> SchemaBuilder:
        """Message configuration for this schema and, by inheritance, its nested schemas."""
        self._ensure_open("configure")
        if messages_file is not None:
            self._messages_files.append(messages_file)
        if mode is not None:
            self._settings["mode"] = MessagesMode(mode)
        if locale is not None:
            self._settings["locale"] = locale
        if default_locale is not None:
            self._settings["default_locale"] = default_locale
        if i18n is not None:
            self._settings["i18n"] = i18n
        if catalog is not None:
            self._settings["catalog"] = catalog
        return self

    def predicate(self, name: str, fn: PredicateFn | None = None, *, message: str | None = None):
        """Define an inline custom predicate. Works as a plain call or as a decorator."""
        if fn is not None:
            self.scope.register(name, fn, message)
            return fn

        def register(func: PredicateFn) -> PredicateFn:
            self.scope.register(name, func, message)
            return func
        return register

    def predicates(self, *modules: PredicateModule) -> SchemaBuilder:
        """Include predicate modules; their message files join this schema's catalog."""
        for module in modules:
            self.scope.include(module)
            if module.messages_path:
                self._messages_files.append(module.messages_path)
        return self

    def required(self, name: str, expression: RuleExpression | str | None = None) -> SchemaBuilder:
        return self._add_field(FieldRule(name, _as_expression(expression), required=True))

    def optional(self, name: str, expression: RuleExpression | str | None = None) -> SchemaBuilder:
        return self._add_field(FieldRule(name, _as_expression(expression), required=False))

    def schema(self, name: str, *, required: bool = True) -> SchemaBuilder:
        """Declare a nested schema; returns its builder."""
        child = SchemaBuilder(name=name, required=required, parent=self)
        self._add_field(child)
        return child

    def _add_field(self, entry: FieldRule | SchemaBuilder) -> SchemaBuilder:
        self._ensure_open(entry.name)
        if entry.name in self._fields:
            raise SchemaDefinitionError.duplicate_field(entry.name)
        self._fields[entry.name] = entry
        return self

    def _ensure_open(self, name: str) -> None:
        if self.scope.frozen:
            raise SchemaDefinitionError.frozen(name)

    def __enter__(self) -> SchemaBuilder:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self) -> SchemaNode:
        """Build the whole tree this builder belongs to and return this builder's node."""
        root = self
        while root._parent is not None:
            root = root._parent
        if root._node is None:
            root._check()
            root._build(None)
            root._freeze()
        assert self._node is not None
        return self._node

    def _message_config(self, inherited: MessageConfig | None) -> MessageConfig:
        if inherited is None:
            config = MessageConfig.from_settings()
            if not self._messages_files and (default_file := get_settings().MESSAGES_FILE):
                self._messages_files.append(default_file)
        else:
            config = inherited

        catalog = config.catalog
        if "catalog" in self._settings:
            catalog = catalog.merge(self._settings["catalog"])
        for path in self._messages_files:
            catalog = catalog.merge(self._loader(path))

        changes = {k: v for k, v in self._settings.items() if k != "catalog"}
        config = config.replace(catalog=catalog, **changes)
        if config.mode is MessagesMode.I18N:
            backend = config.i18n
            if isinstance(backend, CatalogI18n):
                backend = backend.fallback
            backend = backend or default_i18n()
            config = config.replace(i18n=CatalogI18n(catalog, fallback=backend) if catalog else backend)
        return config

    def _check(self) -> None:
        for entry in self._fields.values():
            if isinstance(entry, SchemaBuilder):
                entry._check()
            elif entry.expression is not None:
                entry.expression.check(self.scope)

    def _freeze(self) -> None:
        self.scope.freeze()
        for entry in self._fields.values():
            if isinstance(entry, SchemaBuilder):
                entry._freeze()

    def _build(self, inherited: MessageConfig | None) -> SchemaNode:
        config = self._message_config(inherited)
        fields: dict[str, FieldRule | SchemaNode] = {}
        for name, entry in self._fields.items():
            fields[name] = entry._build(config) if isinstance(entry, SchemaBuilder) else entry

        self._node = SchemaNode(fields=MappingProxyType(fields), scope=self.scope, messages=config,
            resolver=MessageResolver(config), name=self.name, required=self.is_required)
        log.debug("schema_built", schema=self.scope.label, fields=list(fields),
            mode=config.mode.value, catalog_entries=len(config.catalog))
        return self._node
