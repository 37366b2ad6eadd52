"""Metrics collection for fetch tasks."""

from dataclasses import dataclass, field
from threading import Lock
from typing import ClassVar

from shutfetch.fetch.errors import FetchErrorClass


_metrics_lock: Lock = Lock()


@dataclass
class FetchMetrics:
    """Metrics for fetch task executions.

    Singleton class shared by all tasks in the process. Tasks run on
    worker threads, so every mutation happens under a lock.
    """

    attempts_total: int = 0
    retries_total: int = 0
    bytes_total: int = 0
    outcomes_total: dict[str, int] = field(default_factory=dict)
    failures_total: dict[str, int] = field(default_factory=dict)

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        with _metrics_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        with _metrics_lock:
            cls._instance = None

    def record_attempt(self, retry: bool) -> None:
        """Record a transport attempt.

        Args:
            retry: Whether the attempt follows a failed one.
        """
        with self._lock:
            self.attempts_total += 1
            if retry:
                self.retries_total += 1

    def record_bytes(self, bytes_received: int) -> None:
        """Record bytes received from the transport."""
        with self._lock:
            self.bytes_total += bytes_received

    def record_outcome(self, state_name: str) -> None:
        """Record the terminal state a task reached.

        Args:
            state_name: Name of the terminal TaskState.
        """
        with self._lock:
            self.outcomes_total[state_name] = (
                self.outcomes_total.get(state_name, 0) + 1
            )

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a failed execution.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        with self._lock:
            self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def to_dict(self) -> dict[str, int | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "fetch_attempts_total": self.attempts_total,
                "fetch_retries_total": self.retries_total,
                "fetch_bytes_total": self.bytes_total,
                "fetch_outcomes_total": dict(self.outcomes_total),
                "fetch_failures_total": dict(self.failures_total),
            }
