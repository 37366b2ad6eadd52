"""Structured logging for fetch tasks.

Every worker thread logs inside ``task_context`` so its events carry the
task_id, and any ``url`` field is stripped of credentials before rendering.
"""

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

from shutfetch.observability.redact import redact_url_credentials


# httpx logs one INFO line per request, full URL included
_CHATTY_LIBRARY_LOGGERS = ("httpx", "httpcore")


def redact_event_url(
    _logger: Any,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Strip user:password credentials from the event's url field."""
    url = event_dict.get("url")
    if isinstance(url, str):
        event_dict["url"] = redact_url_credentials(url)
    return event_dict


def level_from_name(name: str) -> int:
    """Map a level name such as ``"warning"`` to its logging constant.

    Raises:
        ValueError: If the name is not a standard logging level.
    """
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        msg = f"Unknown log level: {name}"
        raise ValueError(msg)
    return level


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for fetch task events.

    Args:
        level: Minimum level emitted (default: INFO).
        output: Output stream (default: stderr).
        json_format: JSON lines when True, colored console output otherwise.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_event_url,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    # Transport events already cover each request
    for name in _CHATTY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_task_context(task_id: str) -> None:
    """Bind task_id to all log messages in the current context.

    Args:
        task_id: Fetch task identifier.
    """
    structlog.contextvars.bind_contextvars(task_id=task_id)


def clear_task_context() -> None:
    """Remove task_id from the current context."""
    structlog.contextvars.unbind_contextvars("task_id")


@contextmanager
def task_context(task_id: str) -> Iterator[None]:
    """Bind task_id for the duration of a block of work.

    Args:
        task_id: Fetch task identifier.

    Yields:
        None; the binding is removed on exit, including on error.
    """
    bind_task_context(task_id)
    try:
        yield
    finally:
        clear_task_context()
