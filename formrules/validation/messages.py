"""Failure Message Resolution

When a predicate fails, its message is taken from the first source that has
one, in this order:

1. inline message given at the rule site (`rule("adult?", message=...)`)
2. message registered with the predicate
3. static mode: the schema's message catalog, for the locale then the default locale
4. i18n mode: the i18n lookup, key `errors.<predicate>`
5. the predicate's built-in default template

Message files are YAML, one section per locale:

    en:
      errors:
        email?: "must be an email"
        gt?: "must be greater than {num}"

Templates accept `{name}` and `%{name}` placeholders, bound to predicate
arguments and to `input`. Unknown placeholders are left as written.

Files must be UTF-8. Only true/false are read as booleans, so locale keys
such as `no:` or `on:` stay strings.

In i18n mode the message files a schema loads (its own, its modules' and
its parents') are layered over the i18n backend by CatalogI18n.
"""
from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Protocol

import yaml
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError as PydanticValidationError

from formrules.config import get_settings
from formrules.logging import messages_logger

from .errors import MessageFileError, MissingMessageError
from .scope import PredicateScope

log = messages_logger()

PLACEHOLDER = re.compile(r"%?\{(\w+)\}")
ERRORS_NAMESPACE = "errors"


class MessagesMode(str, Enum):
    """Which external source backs message resolution for a schema."""
    STATIC = "static"
    I18N = "i18n"


# ============================================================================
# Interpolation
# ============================================================================

def _format_value(value: Any) -> str:
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, range):
        return f"{value.start}..{value.stop - 1}"
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
        return ", ".join(str(item) for item in items)
    return str(value)


def render(template: str, interpolations: Mapping[str, Any] | None = None) -> str:
    """Fill `{name}` / `%{name}` placeholders; leave unknown ones untouched."""
    if not interpolations:
        return template

    def substitute(match: re.Match) -> str:
        key = match.group(1)
        if key not in interpolations:
            return match.group(0)
        return _format_value(interpolations[key])

    return PLACEHOLDER.sub(substitute, template)


# ============================================================================
# Static Message Catalogs
# ============================================================================

class LocaleMessages(BaseModel):
    """One locale section of a message file."""
    model_config = ConfigDict(extra="ignore")

    errors: dict[str, str] = {}


MESSAGE_FILE_ADAPTER = TypeAdapter(dict[str, LocaleMessages])


class MessageCatalog:
    """Immutable mapping of (locale, predicate name) to message text."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[tuple[str, str], str] | None = None):
        self._entries: dict[tuple[str, str], str] = dict(entries or {})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MessageCatalog:
        """Build from the nested `{locale: {errors: {name: text}}}` layout."""
        sections = MESSAGE_FILE_ADAPTER.validate_python(data)
        return cls({(locale, name): text
            for locale, section in sections.items() for name, text in section.errors.items()})

    def get(self, locale: str, name: str) -> str | None:
        return self._entries.get((locale, name))

    def merge(self, other: MessageCatalog) -> MessageCatalog:
        """New catalog with entries of `other` overriding these."""
        if not other:
            return self
        return MessageCatalog({**self._entries, **other._entries})

    def locales(self) -> list[str]:
        return sorted({locale for locale, _ in self._entries})

    def __getitem__(self, key: tuple[str, str]) -> str:
        return self._entries[key]

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MessageCatalog) and self._entries == other._entries

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"MessageCatalog({len(self._entries)} entries, locales={self.locales()!r})"


MessageLoader = Callable[[str], MessageCatalog]


class _MessageFileLoader(yaml.SafeLoader):
    """SafeLoader resolving only true/false as booleans."""


_MessageFileLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_MessageFileLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _read_yaml(path: str) -> Any:
    file = Path(path)
    if not file.is_file():
        raise MessageFileError(path, "file not found", missing=True)
    try:
        with file.open(encoding="utf-8") as fh:
            return yaml.load(fh, Loader=_MessageFileLoader) or {}
    except UnicodeDecodeError as e:
        raise MessageFileError(path, f"invalid encoding, expected UTF-8: {e}", cause=e) from e
    except yaml.YAMLError as e:
        raise MessageFileError(path, f"invalid YAML: {e}", cause=e) from e
    except OSError as e:
        raise MessageFileError(path, str(e), cause=e) from e


@lru_cache(maxsize=64)
def load_messages(path: str) -> MessageCatalog:
    """Load a YAML message file into a catalog. Cached per path."""
    data = _read_yaml(path)
    try:
        catalog = MessageCatalog.from_mapping(data)
    except PydanticValidationError as e:
        raise MessageFileError(path, f"unexpected layout: {e.error_count()} error(s)", cause=e) from e
    log.debug("message_file_loaded", path=path, entries=len(catalog), locales=catalog.locales())
    return catalog


# ============================================================================
# i18n
# ============================================================================

class I18nLookup(Protocol):
    """Translation backend: returns the text for a key, or None if unknown."""

    def __call__(
        self, locale: str, key: str, interpolations: Mapping[str, Any] | None = None
    ) -> str | None: ...


def _deep_merge(base: dict, extra: Mapping) -> dict:
    merged = dict(base)
    for key, value in extra.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class YamlI18n:
    """i18n backend over nested YAML translation files.

    Later files override earlier ones. Keys are dotted paths below the
    locale: `errors.url?` resolves `en -> errors -> url?`.
    """

    def __init__(self, paths: list[str] | tuple[str, ...] = (), *, translations: Mapping[str, Any] | None = None):
        data: dict = {}
        for path in paths:
            content = _read_yaml(path)
            if not isinstance(content, Mapping):
                raise MessageFileError(path, "top level must be a mapping of locales")
            data = _deep_merge(data, content)
        if translations:
            data = _deep_merge(data, translations)
        self._translations = data
        log.debug("translations_loaded", files=list(paths), locales=sorted(self._translations))

    def __call__(
        self, locale: str, key: str, interpolations: Mapping[str, Any] | None = None
    ) -> str | None:
        node: Any = self._translations.get(locale)
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        if not isinstance(node, str):
            return None
        return render(node, interpolations)


class CatalogI18n:
    """i18n lookup answering `errors.<name>` from a catalog, then from `fallback`."""

    def __init__(self, catalog: MessageCatalog, fallback: I18nLookup | None = None):
        self.catalog = catalog
        self.fallback = fallback

    def __call__(
        self, locale: str, key: str, interpolations: Mapping[str, Any] | None = None
    ) -> str | None:
        namespace, _, name = key.partition(".")
        if namespace == ERRORS_NAMESPACE and (text := self.catalog.get(locale, name)) is not None:
            return render(text, interpolations)
        if self.fallback is None:
            return None
        return self.fallback(locale, key, interpolations)


@lru_cache
def default_i18n() -> YamlI18n:
    """Backend built from FORMRULES_I18N_LOAD_PATH."""
    return YamlI18n(get_settings().I18N_LOAD_PATH)


# ============================================================================
# Per-schema Configuration and Resolution
# ============================================================================

@dataclass(frozen=True, slots=True)
class MessageConfig:
    """How a schema finds message text. Nested schemas inherit it."""
    mode: MessagesMode = MessagesMode.STATIC
    locale: str = "en"
    default_locale: str = "en"
    catalog: MessageCatalog = field(default_factory=MessageCatalog)
    i18n: I18nLookup | None = None

    @classmethod
    def from_settings(cls) -> MessageConfig:
        settings = get_settings()
        return cls(mode=MessagesMode(settings.MESSAGES_MODE), locale=settings.DEFAULT_LOCALE,
            default_locale=settings.DEFAULT_LOCALE)

    def replace(self, **changes: Any) -> MessageConfig:
        return dataclasses.replace(self, **changes)


class MessageResolver:
    """Resolves the text shown for a failing predicate."""

    def __init__(self, config: MessageConfig):
        self.config = config

    def resolve(
        self,
        name: str,
        inline: str | None,
        locale: str | None,
        scope: PredicateScope,
        *,
        args: tuple[Any, ...] = (),
        value: Any = None,
    ) -> str:
        predicate = scope.resolve(name)
        interpolations = predicate.interpolations(args, value)
        locale = locale or self.config.locale

        if inline is not None:
            return render(inline, interpolations)
        if predicate.message is not None:
            return render(predicate.message, interpolations)

        if self.config.mode is MessagesMode.STATIC:
            if (text := self._from_catalog(name, locale)) is not None:
                return render(text, interpolations)
        elif (text := self._from_i18n(name, locale, interpolations)) is not None:
            return text

        if predicate.default_message is not None:
            return render(predicate.default_message, interpolations)
        raise MissingMessageError(name, locale)

    def _from_catalog(self, name: str, locale: str) -> str | None:
        catalog = self.config.catalog
        text = catalog.get(locale, name)
        if text is None and locale != self.config.default_locale:
            text = catalog.get(self.config.default_locale, name)
        return text

    def _from_i18n(self, name: str, locale: str, interpolations: Mapping[str, Any]) -> str | None:
        if self.config.i18n is None:
            return None
        key = f"{ERRORS_NAMESPACE}.{name}"
        text = self.config.i18n(locale, key, interpolations)
        if text is None and locale != self.config.default_locale:
            text = self.config.i18n(self.config.default_locale, key, interpolations)
        return text
