"""Pydantic schemas for run, task and worker observation."""
from typing import List, Optional
from pydantic import BaseModel, Field
from conductor.core.enums import StepAction, TaskStatus, WorkerStatus


class GoalSubmit(BaseModel):
    """Schema for submitting a goal."""

    goal: str = Field(..., min_length=1, max_length=2000, description="Automation goal")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"goal": "Log in with username 'admin' and password 'password123'"}
            ]
        }
    }


class TargetStateResponse(BaseModel):
    """Simulated surface of a worker."""

    field_a: str
    field_b: str
    action_flag: bool

    model_config = {"from_attributes": True}


class WorkerResponse(BaseModel):
    """Schema for worker responses."""

    id: int
    status: WorkerStatus
    target_state: TargetStateResponse

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    """Schema for task responses."""

    id: int
    description: str
    action: StepAction
    selector: str
    value: Optional[str]
    status: TaskStatus
    assigned_worker: Optional[int]

    model_config = {"from_attributes": True}


class RunResponse(BaseModel):
    """Schema for run snapshots."""

    run_id: int
    is_running: bool
    completed: bool
    error: Optional[str]
    queue_length: int
    busy_workers: int
    workers: List[WorkerResponse]
    tasks: List[TaskResponse]

    model_config = {"from_attributes": True}
