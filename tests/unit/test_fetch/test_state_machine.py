"""Unit tests for the fetch task state machine."""

import threading

import pytest

from shutfetch.fetch.state_machine import TaskState, TaskStateError, TaskStateMachine


class TestTaskStateMachine:
    """Tests for TaskStateMachine."""

    def test_initial_state_is_created(self) -> None:
        """State machine starts in CREATED."""
        sm = TaskStateMachine("task-1")
        assert sm.state == TaskState.CREATED
        assert sm.task_id == "task-1"
        assert not sm.is_terminal()

    def test_created_to_running(self) -> None:
        """Can transition from CREATED to RUNNING."""
        sm = TaskStateMachine("test")
        sm.transition(TaskState.RUNNING)
        assert sm.state == TaskState.RUNNING

    @pytest.mark.parametrize(
        "terminal", [TaskState.SUCCEEDED, TaskState.FAILED, TaskState.CANCELLED]
    )
    def test_running_to_terminal(self, terminal: TaskState) -> None:
        """RUNNING can reach each terminal state."""
        sm = TaskStateMachine("test")
        sm.transition(TaskState.RUNNING)
        sm.transition(terminal)
        assert sm.state == terminal
        assert sm.is_terminal()

    @pytest.mark.parametrize(
        ("terminal", "succeeded", "failed", "cancelled"),
        [
            (TaskState.SUCCEEDED, True, False, False),
            (TaskState.FAILED, False, True, False),
            (TaskState.CANCELLED, False, False, True),
        ],
    )
    def test_outcome_predicates(
        self, terminal: TaskState, succeeded: bool, failed: bool, cancelled: bool
    ) -> None:
        """Exactly one outcome predicate holds per terminal state."""
        sm = TaskStateMachine("test")
        sm.transition(TaskState.RUNNING)
        assert not sm.is_succeeded()
        sm.transition(terminal)
        assert sm.is_succeeded() is succeeded
        assert sm.is_failed() is failed
        assert sm.is_cancelled() is cancelled

    def test_created_to_cancelled(self) -> None:
        """An unstarted task can be cancelled."""
        sm = TaskStateMachine("test")
        assert sm.try_finish(TaskState.CANCELLED) is True
        assert sm.is_cancelled()

    def test_created_cannot_succeed(self) -> None:
        """CREATED cannot jump to SUCCEEDED."""
        sm = TaskStateMachine("test")
        with pytest.raises(TaskStateError) as exc_info:
            sm.transition(TaskState.SUCCEEDED)
        assert exc_info.value.from_state == TaskState.CREATED
        assert exc_info.value.to_state == TaskState.SUCCEEDED

    def test_terminal_states_are_final(self) -> None:
        """No transitions leave a terminal state."""
        sm = TaskStateMachine("test")
        sm.transition(TaskState.RUNNING)
        sm.transition(TaskState.SUCCEEDED)
        with pytest.raises(TaskStateError):
            sm.transition(TaskState.RUNNING)
        with pytest.raises(TaskStateError):
            sm.transition(TaskState.FAILED)

    def test_try_finish_only_once(self) -> None:
        """A second terminal request is refused without raising."""
        sm = TaskStateMachine("test")
        sm.transition(TaskState.RUNNING)
        assert sm.try_finish(TaskState.FAILED) is True
        assert sm.try_finish(TaskState.CANCELLED) is False
        assert sm.is_failed()

    def test_try_finish_rejects_non_terminal(self) -> None:
        """try_finish only accepts terminal states."""
        sm = TaskStateMachine("test")
        with pytest.raises(TaskStateError):
            sm.try_finish(TaskState.RUNNING)

    def test_try_finish_single_winner_under_contention(self) -> None:
        """Exactly one of many concurrent finishers wins."""
        sm = TaskStateMachine("test")
        sm.transition(TaskState.RUNNING)
        barrier = threading.Barrier(8)
        wins: list[bool] = []

        def finish(state: TaskState) -> None:
            barrier.wait()
            wins.append(sm.try_finish(state))

        threads = [
            threading.Thread(
                target=finish,
                args=(TaskState.SUCCEEDED if i % 2 else TaskState.CANCELLED,),
            )
            for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert wins.count(True) == 1
        assert sm.is_terminal()
