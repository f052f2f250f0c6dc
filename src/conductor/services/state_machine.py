"""Task state machine logic for managing valid task state transitions."""
from typing import Set, Dict
from conductor.core.enums import TaskStatus
from conductor.core.exceptions import InvalidStateTransitionError


class TaskStateMachine:
    """
    Defines valid state transitions for tasks.

    Transitions are monotonic; terminal states never change again.

    State Diagram:
        PENDING → ACTIVE → COMPLETED/ERRORED
    """

    TRANSITIONS: Dict[TaskStatus, Set[TaskStatus]] = {
        TaskStatus.PENDING: {TaskStatus.ACTIVE},
        TaskStatus.ACTIVE: {TaskStatus.COMPLETED, TaskStatus.ERRORED},
        TaskStatus.COMPLETED: set(),  # Terminal state
        TaskStatus.ERRORED: set(),  # Terminal state
    }

    TERMINAL_STATES = {TaskStatus.COMPLETED, TaskStatus.ERRORED}

    @classmethod
    def can_transition(cls, from_state: TaskStatus, to_state: TaskStatus) -> bool:
        """
        Check if transition from from_state to to_state is valid.

        Args:
            from_state: Current task status
            to_state: Desired task status

        Returns:
            bool: True if transition is valid, False otherwise
        """
        return to_state in cls.TRANSITIONS.get(from_state, set())

    @classmethod
    def validate_transition(cls, from_state: TaskStatus, to_state: TaskStatus) -> None:
        """
        Validate state transition and raise exception if invalid.

        Raises:
            InvalidStateTransitionError: If transition is not valid
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(
                f"Invalid state transition: {from_state} -> {to_state}"
            )

    @classmethod
    def is_terminal(cls, state: TaskStatus) -> bool:
        """Check if state is terminal (no further transitions possible)."""
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, from_state: TaskStatus) -> Set[TaskStatus]:
        """Get all valid next states from current state."""
        return cls.TRANSITIONS.get(from_state, set())
