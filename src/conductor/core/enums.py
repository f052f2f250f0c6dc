"""Core enumerations for the Conductor dispatch scheduler."""
from enum import Enum


class TaskStatus(str, Enum):
    """
    Task state machine states.

    State flow:
        PENDING → ACTIVE → COMPLETED
                      ↓
                   ERRORED
    """

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ERRORED = "ERRORED"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class WorkerStatus(str, Enum):
    """
    Worker availability states.

    - IDLE: Worker can accept a task
    - BUSY: Worker is executing exactly one task
    """

    IDLE = "IDLE"
    BUSY = "BUSY"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class StepAction(str, Enum):
    """Browser-style actions a plan step can perform."""

    TYPE = "type"
    CLICK = "click"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value
