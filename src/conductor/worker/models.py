"""Worker data models and result classes."""
from dataclasses import dataclass


@dataclass
class EffectResult:
    """
    Outcome of applying a task's effect to a target state.

    ``pulse`` requests a delayed reset of the action flag.
    """

    applied: bool
    pulse: bool = False


@dataclass
class ExecutionResult:
    """
    Result of a simulated task execution.

    Tracks which worker ran which task and how long it took.
    """

    task_id: int
    worker_id: int
    run_id: int
    duration: float
    effect: EffectResult
