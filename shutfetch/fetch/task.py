"""Background fetch task with bounded retries and single-callback delivery."""

import time
import uuid
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from threading import Event, Lock

import structlog

from shutfetch.fetch.config import FetchConfig
from shutfetch.fetch.errors import (
    BodyParseError,
    FetchErrorClass,
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
from shutfetch.observability.redact import redact_url_credentials
from shutfetch.fetch.state_machine import TaskState, TaskStateMachine
from shutfetch.fetch.transport import HttpxTransport, Transport
from shutfetch.observability.logging import task_context


logger = structlog.get_logger()

SUPPORTED_SHAPES = frozenset({ResultShape.ARRAY, ResultShape.OBJECT})


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one execution and the terminal state it leads to."""

    state: TaskState
    outcome: FetchOutcome
    duration_ms: float = 0.0


def _run_inline(callback: Callable[[], None]) -> None:
    callback()


def _always_active() -> bool:
    return True


class FetchTask:
    """Fetches one JSON resource off the caller's thread.

    Lifecycle:
    - start() shows the progress indicator (if wanted) and submits the
      fetch to a background executor
    - execute() runs the bounded retry loop and computes the outcome
    - the outcome is handed to ``dispatch`` and delivered to the listener
      as exactly one of on_response_fetched / on_request_failed
    - cancel() may end the task first; a later result is then dropped
    """

    def __init__(  # noqa: PLR0913
        self,
        is_online: ConnectivityCheck,
        descriptor: RequestDescriptor,
        listener: ResultListener,
        *,
        progress: ProgressIndicator | None = None,
        show_progress: bool = True,
        is_target_active: Callable[[], bool] | None = None,
        transport: Transport | None = None,
        config: FetchConfig | None = None,
        executor: Executor | None = None,
        dispatch: Dispatch | None = None,
        task_id: str | None = None,
    ) -> None:
        """Initialize the fetch task.

        Args:
            is_online: Connectivity predicate, checked before every attempt.
            descriptor: Request to perform.
            listener: Receiver of the terminal outcome.
            progress: Optional progress indicator owned by this task.
            show_progress: Whether to show the indicator at start.
            is_target_active: Reports whether the delivery target (e.g. the
                owning screen) is still alive; the indicator is only shown
                when it is.
            transport: HTTP transport (defaults to HttpxTransport).
            config: Fetch configuration.
            executor: Background executor; a private single-thread pool is
                used when omitted.
            dispatch: Runs callbacks on the caller's delivery context;
                defaults to running them on the worker thread.
            task_id: Identifier for logging (random when omitted).
        """
        self._is_online = is_online
        self._descriptor = descriptor
        self._listener = listener
        self._progress = progress
        self._show_progress = show_progress
        self._is_target_active = is_target_active or _always_active
        self._config = config or FetchConfig()
        self._transport = transport or HttpxTransport(self._config)
        self._executor = executor
        self._dispatch = dispatch or _run_inline
        self._task_id = task_id or uuid.uuid4().hex[:12]

        self._state = TaskStateMachine(self._task_id)
        self._cancel_requested = Event()
        self._progress_lock = Lock()
        self._progress_visible = False
        self._future: Future[None] | None = None
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(
            component="fetch",
            task_id=self._task_id,
            url=redact_url_credentials(descriptor.url),
            shape=descriptor.shape.value,
        )

    @property
    def task_id(self) -> str:
        """Get the task ID."""
        return self._task_id

    @property
    def descriptor(self) -> RequestDescriptor:
        """Get the request descriptor."""
        return self._descriptor

    @property
    def state(self) -> TaskState:
        """Get the current lifecycle state."""
        return self._state.state

    @property
    def is_cancelled(self) -> bool:
        """Check if cancel() ended the task."""
        return self._cancel_requested.is_set()

    def start(self) -> Future[None]:
        """Start the task in the background.

        Returns:
            Future completing once the background work (and, with the
            default dispatch, the listener callback) is done.

        Raises:
            TaskStateError: If the task was already started or cancelled.
        """
        self._state.transition(TaskState.RUNNING)
        self._show_progress_if_wanted()

        executor = self._executor
        owns_executor = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="fetch-task"
            )
        try:
            future = executor.submit(self._run_in_background)
        finally:
            if owns_executor:
                executor.shutdown(wait=False)
        self._future = future
        return future

    def join(self, timeout: float | None = None) -> None:
        """Wait for the background work started by start().

        Args:
            timeout: Seconds to wait, or None to wait indefinitely.

        Raises:
            TimeoutError: If the work did not finish in time.
        """
        if self._future is not None:
            self._future.result(timeout=timeout)

    def cancel(self, notify_listener: bool = True) -> bool:
        """Cancel the task unless it already reached a terminal state.

        In-flight I/O is not interrupted; the worker stops before its next
        attempt and any result it still produces is dropped.

        Args:
            notify_listener: Whether to call on_request_failed().

        Returns:
            True if this call cancelled the task.
        """
        if not self._state.try_finish(TaskState.CANCELLED):
            return False
        self._cancel_requested.set()
        self._log.info("task_cancelled", notify_listener=notify_listener)
        self._metrics.record_outcome(TaskState.CANCELLED.name)
        self._metrics.record_failure(FetchErrorClass.CANCELLED)
        self._dismiss_progress()
        if notify_listener:
            self._listener.on_request_failed()
        return True

    def execute(self) -> ExecutionResult | None:
        """Run the fetch algorithm on the current thread.

        Returns:
            The execution result, or None if the task was cancelled
            before an attempt.
        """
        start_time_ns = time.perf_counter_ns()
        result = self._execute_with_retry()
        if result is None:
            return None
        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        return ExecutionResult(
            state=result.state,
            outcome=result.outcome,
            duration_ms=round(duration_ms, 2),
        )

    def _execute_with_retry(self) -> ExecutionResult | None:
        max_attempts = self._config.max_attempts
        descriptor = self._descriptor

        for attempt in range(1, max_attempts + 1):
            if self._cancel_requested.is_set():
                self._log.info("fetch_stopped_cancelled", attempt=attempt)
                return None

            if not self._is_online():
                self._log.info("fetch_offline", attempt=attempt)
                return self._failure(
                    FetchErrorClass.OFFLINE,
                    "Device is offline",
                    attempts=attempt - 1,
                    state=TaskState.CANCELLED,
                )

            if not descriptor.is_valid_url():
                return self._failure(
                    FetchErrorClass.MALFORMED_CONFIG,
                    "Invalid HTTP request URL",
                    attempts=attempt - 1,
                )

            if descriptor.shape not in SUPPORTED_SHAPES:
                return self._failure(
                    FetchErrorClass.UNSUPPORTED_SHAPE,
                    f"Result shape {descriptor.shape.value} is not supported",
                    attempts=attempt - 1,
                )

            url = descriptor.url or ""
            self._metrics.record_attempt(retry=attempt > 1)
            self._log.debug(
                "fetch_attempt", attempt=attempt, max_attempts=max_attempts
            )

            try:
                body = self._transport.get(url)
            except TransportError as e:
                self._log.warning(
                    "fetch_attempt_failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    status_code=e.status_code,
                    error=e.message,
                )
                continue
            except (ResponseSizeExceededError, InvalidUrlError) as e:
                return self._failure(e.error_class, e.message, attempts=attempt)

            self._metrics.record_bytes(len(body))

            try:
                payload = parse_body(body, descriptor.shape, url=url)
            except BodyParseError as e:
                return self._failure(e.error_class, e.message, attempts=attempt)

            return ExecutionResult(
                state=TaskState.SUCCEEDED,
                outcome=FetchSuccess(
                    payload=payload,
                    parameters=descriptor.echo_parameters(),
                ),
            )

        return self._failure(
            FetchErrorClass.TRANSIENT_IO,
            f"Giving up after {max_attempts} attempts",
            attempts=max_attempts,
        )

    def _failure(
        self,
        error_class: FetchErrorClass,
        message: str,
        attempts: int,
        state: TaskState = TaskState.FAILED,
    ) -> ExecutionResult:
        self._log.warning(
            "fetch_failed",
            error_class=error_class.value,
            error=message,
            attempts=attempts,
        )
        return ExecutionResult(
            state=state,
            outcome=FetchFailure(
                error_class=error_class,
                message=message,
                attempts=attempts,
            ),
        )

    def _run_in_background(self) -> None:
        with task_context(self._task_id):
            try:
                result = self.execute()
            except Exception as e:  # noqa: BLE001
                self._log.exception("fetch_unexpected_error", error=str(e))
                result = ExecutionResult(
                    state=TaskState.FAILED,
                    outcome=FetchFailure(
                        error_class=FetchErrorClass.UNKNOWN,
                        message=f"Unexpected error: {e}",
                    ),
                )

        if result is not None:
            self._dispatch(lambda: self._complete(result))

    def _complete(self, result: ExecutionResult) -> None:
        """Deliver a result on the caller's delivery context."""
        if not self._state.try_finish(result.state):
            self._log.info("stale_result_dropped", state=self._state.state.name)
            return

        self._metrics.record_outcome(result.state.name)
        if isinstance(result.outcome, FetchFailure):
            self._metrics.record_failure(result.outcome.error_class)

        self._log.info(
            "fetch_complete",
            state=result.state.name,
            error_class=(
                result.outcome.error_class.value
                if isinstance(result.outcome, FetchFailure)
                else None
            ),
            duration_ms=result.duration_ms,
        )

        self._dismiss_progress()
        if isinstance(result.outcome, FetchSuccess):
            self._listener.on_response_fetched(result.outcome)
        else:
            self._listener.on_request_failed()

    def _show_progress_if_wanted(self) -> None:
        if not self._show_progress or self._progress is None:
            return
        if not self._is_target_active():
            self._log.debug("progress_skipped_inactive_target")
            return
        with self._progress_lock:
            # cancel() may have finished the task while is_target_active ran
            if self._state.is_terminal():
                self._log.debug("progress_skipped_terminal")
                return
            self._progress.show()
            self._progress_visible = True

    def _dismiss_progress(self) -> None:
        with self._progress_lock:
            if self._progress is not None and self._progress_visible:
                self._progress.dismiss()
                self._progress_visible = False
