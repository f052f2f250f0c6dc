"""Immutable snapshots exposed to observers of a run."""
from dataclasses import dataclass
from typing import Optional, Tuple
from conductor.core.enums import StepAction, TaskStatus, WorkerStatus


@dataclass(frozen=True)
class TargetStateSnapshot:
    field_a: str
    field_b: str
    action_flag: bool


@dataclass(frozen=True)
class WorkerSnapshot:
    id: int
    status: WorkerStatus
    target_state: TargetStateSnapshot


@dataclass(frozen=True)
class TaskSnapshot:
    id: int
    description: str
    action: StepAction
    selector: str
    value: Optional[str]
    status: TaskStatus
    assigned_worker: Optional[int]


@dataclass(frozen=True)
class RunSnapshot:
    """
    Point-in-time, read-only view of the whole run.

    Built by the orchestrator; never shares mutable state with the scheduler.
    """

    run_id: int
    is_running: bool
    completed: bool
    error: Optional[str]
    queue_length: int
    workers: Tuple[WorkerSnapshot, ...]
    tasks: Tuple[TaskSnapshot, ...]

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self.workers if w.status == WorkerStatus.BUSY)
