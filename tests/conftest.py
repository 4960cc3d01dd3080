"""Shared fixtures for the formrules test suite."""
from pathlib import Path

import pytest

from formrules.logging import configure_logging
from formrules.validation import (
    MessageCatalog,
    MessageConfig,
    MessageResolver,
    SchemaBuilder,
    Validator,
    builtin_scope,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    configure_logging("WARNING")


@pytest.fixture
def messages_path() -> str:
    return str(FIXTURES / "messages.yml")


@pytest.fixture
def nested_messages_path() -> str:
    return str(FIXTURES / "nested_messages.yml")


@pytest.fixture
def i18n_path() -> str:
    return str(FIXTURES / "i18n.yml")


@pytest.fixture
def fixture_path():
    """Absolute path of a file under tests/fixtures."""
    return lambda name: str(FIXTURES / name)


@pytest.fixture
def scope():
    """A fresh, writable scope below the built-ins."""
    return builtin_scope().child(label="test")


@pytest.fixture
def resolver():
    return MessageResolver(MessageConfig(catalog=MessageCatalog()))


@pytest.fixture
def validate():
    """Build the given builder and validate one input against it."""
    def run(builder: SchemaBuilder, data: dict, **kwargs):
        return Validator(builder).validate(data, **kwargs)
    return run
