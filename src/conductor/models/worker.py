"""Worker and per-worker target state models."""
from dataclasses import dataclass, field
from conductor.core.enums import WorkerStatus


@dataclass
class TargetState:
    """
    Simulated surface a task's effect is applied to.

    For the login sandbox ``field_a`` holds the username input,
    ``field_b`` the password input and ``action_flag`` the button pulse.
    """

    field_a: str = ""
    field_b: str = ""
    action_flag: bool = False

    def reset(self) -> None:
        self.field_a = ""
        self.field_b = ""
        self.action_flag = False


@dataclass
class Worker:
    """Pool member executing at most one task at a time."""

    id: int
    status: WorkerStatus = WorkerStatus.IDLE
    target_state: TargetState = field(default_factory=TargetState)

    @property
    def is_idle(self) -> bool:
        return self.status == WorkerStatus.IDLE
