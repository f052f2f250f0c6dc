"""Task model for a single planned action within a run."""
from dataclasses import dataclass
from typing import Optional
from conductor.core.enums import StepAction, TaskStatus
from conductor.models.plan import PlanStep
from conductor.services.state_machine import TaskStateMachine


@dataclass
class Task:
    """
    A planned action with status and optional worker assignment.

    Ids are assigned sequentially at plan ingestion and never change.
    """

    id: int
    description: str
    action: StepAction
    selector: str
    value: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    assigned_worker: Optional[int] = None

    @classmethod
    def from_step(cls, task_id: int, step: PlanStep) -> "Task":
        """Build a pending task from a validated plan step."""
        return cls(
            id=task_id,
            description=step.step,
            action=step.action,
            selector=step.selector,
            value=step.value,
        )

    def transition(self, new_status: TaskStatus) -> None:
        """
        Move the task to a new status.

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        TaskStateMachine.validate_transition(self.status, new_status)
        self.status = new_status

    @property
    def is_terminal(self) -> bool:
        return TaskStateMachine.is_terminal(self.status)
