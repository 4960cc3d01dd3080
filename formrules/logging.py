"""Structured Logging

structlog setup for the engine. formrules is a library, so configuration
only touches the `formrules` stdlib logger and leaves the host
application's root logger alone:

    from formrules import configure_logging
    configure_logging("DEBUG")              # colored console
    configure_logging("INFO", json_logs=True)

Events are emitted at debug level by the schema, engine and messages
loggers. `validation_context()` binds key-value pairs (schema, locale) to
every event logged while a record is validated.
"""
import logging
import sys
from contextlib import contextmanager
from typing import Iterator, TextIO

import structlog
from structlog.types import EventDict, Processor

LIBRARY_LOGGER = "formrules"
MAX_VALUE_LENGTH = 200


def _add_library_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that tags events with the library name and version."""
    from formrules import __version__

    event_dict.setdefault("library", LIBRARY_LOGGER)
    event_dict.setdefault("version", __version__)
    return event_dict


def _clip_long_values(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that shortens oversized values such as raw input records."""
    for key, value in event_dict.items():
        if key == "event":
            continue
        text = value if isinstance(value, str) else None
        if text is None and isinstance(value, (dict, list, tuple)):
            text = repr(value)
        if text is not None and len(text) > MAX_VALUE_LENGTH:
            event_dict[key] = text[:MAX_VALUE_LENGTH] + "..."
    return event_dict


def get_shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_library_info,
        _clip_long_values,
    ]


def configure_logging(level: str = "INFO", json_logs: bool = False, stream: TextIO | None = None) -> None:
    """Configure structlog and the `formrules` logger.

    Args:
        level: Log level for formrules events (DEBUG shows registrations,
            builds and validation runs)
        json_logs: Emit one JSON object per event instead of colored console lines
        stream: Where to write; defaults to stderr
    """
    shared_processors = get_shared_processors()

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream is None and sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.handlers = [handler]
    library_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    library_logger.propagate = False


def configure_from_settings() -> None:
    """Configure logging from FORMRULES_LOG_LEVEL and FORMRULES_LOG_JSON."""
    from formrules.config import get_settings

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def validation_context(**kwargs) -> Iterator[None]:
    """Bind key-value pairs to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


class LoggerRegistry:
    """One logger per engine area, named `formrules.<area>`."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, area: str) -> structlog.stdlib.BoundLogger:
        if area not in cls._loggers:
            cls._loggers[area] = get_logger(f"{LIBRARY_LOGGER}.{area}")
        return cls._loggers[area]


def schema_logger() -> structlog.stdlib.BoundLogger:
    """Predicate registration and schema builds."""
    return LoggerRegistry.get("schema")


def engine_logger() -> structlog.stdlib.BoundLogger:
    """Validation runs."""
    return LoggerRegistry.get("engine")


def messages_logger() -> structlog.stdlib.BoundLogger:
    """Message file and translation loading."""
    return LoggerRegistry.get("messages")
