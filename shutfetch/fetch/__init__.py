"""Background JSON fetch tasks with bounded retries.

This module provides:
- FetchTask: one request lifecycle off the caller's thread
- Immediate retry of transient I/O failures up to a fixed ceiling
- Exactly one terminal callback per task, even under cancellation
- Maximum response size enforcement
- Metrics collection for observability
"""

from shutfetch.fetch.config import FetchConfig
from shutfetch.fetch.constants import MAX_ATTEMPTS
from shutfetch.fetch.errors import (
    BodyParseError,
    FetchErrorClass,
    FetchTaskError,
    InvalidUrlError,
    ResponseSizeExceededError,
    TransportError,
)
from shutfetch.fetch.metrics import FetchMetrics
from shutfetch.fetch.models import (
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    RequestDescriptor,
    ResultShape,
)
from shutfetch.fetch.parser import parse_body
from shutfetch.fetch.protocols import (
    ConnectivityCheck,
    Dispatch,
    ProgressIndicator,
    ResultListener,
)
from shutfetch.fetch.state_machine import TaskState, TaskStateError, TaskStateMachine
from shutfetch.fetch.task import ExecutionResult, FetchTask
from shutfetch.fetch.transport import HttpxTransport, Transport


__all__ = [
    # Task
    "FetchTask",
    "ExecutionResult",
    # Protocols
    "ConnectivityCheck",
    "Dispatch",
    "ProgressIndicator",
    "ResultListener",
    # Models
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "RequestDescriptor",
    "ResultShape",
    # State
    "TaskState",
    "TaskStateError",
    "TaskStateMachine",
    # Transport
    "HttpxTransport",
    "Transport",
    "parse_body",
    # Config
    "FetchConfig",
    "MAX_ATTEMPTS",
    # Errors
    "BodyParseError",
    "FetchErrorClass",
    "FetchTaskError",
    "InvalidUrlError",
    "ResponseSizeExceededError",
    "TransportError",
    # Metrics
    "FetchMetrics",
]
