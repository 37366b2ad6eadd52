"""Observability module for logging."""

from shutfetch.observability.logging import (
    bind_task_context,
    clear_task_context,
    configure_logging,
    level_from_name,
    redact_event_url,
    task_context,
)


__all__ = [
    "bind_task_context",
    "clear_task_context",
    "configure_logging",
    "level_from_name",
    "redact_event_url",
    "task_context",
]
