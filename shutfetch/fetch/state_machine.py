"""Fetch task lifecycle state machine."""

from enum import Enum, auto
from threading import Lock
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class TaskState(Enum):
    """Fetch task lifecycle states.

    State transitions:
        CREATED -> RUNNING: Task started
        CREATED -> CANCELLED: Cancelled before start
        RUNNING -> SUCCEEDED: Response fetched and parsed
        RUNNING -> FAILED: Any non-offline failure
        RUNNING -> CANCELLED: Offline, or cancelled by the owner
    """

    CREATED = auto()
    RUNNING = auto()
    SUCCEEDED = auto()
    FAILED = auto()
    CANCELLED = auto()


class TaskStateError(Exception):
    """Raised when an invalid task state transition is attempted."""

    def __init__(self, from_state: TaskState, to_state: TaskState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid task state transition: {from_state.name} -> {to_state.name}"
        )


class TaskStateMachine:
    """State machine for one fetch task.

    Transitions may be requested from the worker thread, the delivery
    context and cancel() concurrently; each check-and-set is atomic.
    """

    VALID_TRANSITIONS: ClassVar[dict[TaskState, set[TaskState]]] = {
        TaskState.CREATED: {TaskState.RUNNING, TaskState.CANCELLED},
        TaskState.RUNNING: {
            TaskState.SUCCEEDED,
            TaskState.FAILED,
            TaskState.CANCELLED,
        },
        TaskState.SUCCEEDED: set(),  # Terminal state
        TaskState.FAILED: set(),  # Terminal state
        TaskState.CANCELLED: set(),  # Terminal state
    }

    TERMINAL_STATES: ClassVar[frozenset[TaskState]] = frozenset(
        {TaskState.SUCCEEDED, TaskState.FAILED, TaskState.CANCELLED}
    )

    def __init__(self, task_id: str) -> None:
        """Initialize the state machine in CREATED state.

        Args:
            task_id: Task identifier for logging.
        """
        self._task_id = task_id
        self._state = TaskState.CREATED
        self._lock = Lock()
        self._log = logger.bind(task_id=task_id, component="fetch")

    @property
    def state(self) -> TaskState:
        """Get the current state."""
        return self._state

    @property
    def task_id(self) -> str:
        """Get the task ID."""
        return self._task_id

    def can_transition(self, to_state: TaskState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: The target state.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: TaskState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            TaskStateError: If the transition is invalid.
        """
        with self._lock:
            if not self.can_transition(to_state):
                self._log.error(
                    "invariant_violation",
                    error_type="illegal_state_transition",
                    from_state=self._state.name,
                    to_state=to_state.name,
                )
                raise TaskStateError(self._state, to_state)
            self._apply(to_state)

    def try_finish(self, to_state: TaskState) -> bool:
        """Enter a terminal state unless one was already entered.

        Args:
            to_state: The terminal target state.

        Returns:
            True if this call performed the transition, False if the task
            was already terminal.

        Raises:
            TaskStateError: If to_state is not terminal, or not reachable.
        """
        if to_state not in self.TERMINAL_STATES:
            raise TaskStateError(self._state, to_state)
        with self._lock:
            if self._state in self.TERMINAL_STATES:
                return False
            if not self.can_transition(to_state):
                raise TaskStateError(self._state, to_state)
            self._apply(to_state)
            return True

    def _apply(self, to_state: TaskState) -> None:
        old_state = self._state
        self._state = to_state
        self._log.info(
            "task_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return self._state in self.TERMINAL_STATES

    def is_succeeded(self) -> bool:
        """Check if the task completed successfully."""
        return self._state == TaskState.SUCCEEDED

    def is_failed(self) -> bool:
        """Check if the task failed."""
        return self._state == TaskState.FAILED

    def is_cancelled(self) -> bool:
        """Check if the task was cancelled."""
        return self._state == TaskState.CANCELLED
