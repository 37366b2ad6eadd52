"""Protocol interfaces for fetch task collaborators."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from shutfetch.fetch.models import FetchSuccess


ConnectivityCheck = Callable[[], bool]
"""Reports whether the device currently has network connectivity."""

Dispatch = Callable[[Callable[[], None]], object]
"""Runs a callback on the caller's delivery context (e.g. ``call_soon_threadsafe``)."""


@runtime_checkable
class ResultListener(Protocol):
    """Receiver of a fetch task's terminal outcome.

    Exactly one of the two methods is called per task that reaches a
    terminal state. Implementations must return promptly; they may run on
    a shared worker thread.
    """

    def on_response_fetched(self, outcome: FetchSuccess) -> None:
        """Deliver a successfully fetched and parsed response.

        Args:
            outcome: Parsed payload and echoed query parameters.
        """
        ...

    def on_request_failed(self) -> None:
        """Signal that the request failed or was cancelled."""
        ...


@runtime_checkable
class ProgressIndicator(Protocol):
    """UI affordance shown while a task runs."""

    def show(self) -> None:
        """Show the indicator."""
        ...

    def dismiss(self) -> None:
        """Hide the indicator."""
        ...
