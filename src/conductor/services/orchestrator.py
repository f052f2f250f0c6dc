"""Orchestrator: plan ingestion, run control and observation boundary."""
import asyncio
import logging
from typing import Callable, List, Optional
from conductor.config import Settings
from conductor.core.exceptions import GenerationError, RunAlreadyActiveError
from conductor.models.snapshot import (
    RunSnapshot,
    TargetStateSnapshot,
    TaskSnapshot,
    WorkerSnapshot,
)
from conductor.models.task import Task
from conductor.models.worker import Worker
from conductor.observability.metrics import (
    record_plan_generation_failed,
    record_run_started,
    update_pool_metrics,
)
from conductor.services.plan_source import PlanSource, build_plan_source
from conductor.services.scheduler import Scheduler
from conductor.services.task_queue import TaskQueue
from conductor.services.worker_pool import WorkerPool
from conductor.worker.effect_registry import EffectRegistry, build_default_registry
from conductor.worker.execution_simulator import ExecutionSimulator

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[RunSnapshot], None]


class Orchestrator:
    """
    Entry point for submitting goals and observing runs.

    Owns the scheduler and its collaborators. Only one run may be active
    at a time; a new submission hard-resets all state.
    """

    def __init__(
        self,
        plan_source: PlanSource,
        pool_size: int = 4,
        tick_interval: float = 0.2,
        execution_delay: float = 1.5,
        pulse_duration: float = 0.5,
        registry: Optional[EffectRegistry] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            plan_source: Source turning goals into plans
            pool_size: Number of workers
            tick_interval: Seconds between scheduler ticks
            execution_delay: Simulated task latency in seconds
            pulse_duration: Seconds before a click pulse resets
            registry: Effect registry (defaults to the login sandbox)
        """
        self.plan_source = plan_source
        self.pool = WorkerPool(pool_size)
        self.queue = TaskQueue()
        self.simulator = ExecutionSimulator(
            registry or build_default_registry(),
            execution_delay=execution_delay,
            pulse_duration=pulse_duration,
            lock=asyncio.Lock(),
        )
        self.scheduler = Scheduler(
            self.pool,
            self.queue,
            self.simulator,
            tick_interval=tick_interval,
        )

        # State
        self.is_running = False
        self.error: Optional[str] = None
        self.goal: Optional[str] = None
        self._subscribers: List[SnapshotListener] = []

        self.scheduler.add_tick_listener(self._publish)
        self.scheduler.add_completion_listener(self._on_run_completed)
        self.scheduler.add_failure_listener(self._on_scheduler_failed)
        self.simulator.add_listener(self._publish)

    @classmethod
    def from_settings(
        cls, settings: Settings, plan_source: Optional[PlanSource] = None
    ) -> "Orchestrator":
        """Build an orchestrator configured from application settings."""
        return cls(
            plan_source=plan_source or build_plan_source(settings),
            pool_size=settings.WORKER_POOL_SIZE,
            tick_interval=settings.SCHEDULER_TICK_INTERVAL,
            execution_delay=settings.TASK_EXECUTION_DELAY,
            pulse_duration=settings.CLICK_PULSE_DURATION,
        )

    async def submit_goal(self, goal: str) -> RunSnapshot:
        """
        Generate a plan for a goal and start executing it.

        Args:
            goal: Natural-language automation goal

        Returns:
            RunSnapshot: State right after the run started

        Raises:
            RunAlreadyActiveError: If a run is already active
            GenerationError: If the plan source fails; no run is started
        """
        if self.is_running:
            logger.warning("Rejected goal submission: a run is already active")
            raise RunAlreadyActiveError("A run is already active")

        await self._hard_reset()
        self.goal = goal
        self.is_running = True
        self._publish()

        try:
            steps = await self.plan_source.generate_plan(goal)
        except GenerationError as e:
            self.error = str(e) or "An unknown error occurred."
            self.is_running = False
            record_plan_generation_failed()
            logger.error(f"Plan generation failed for goal {goal!r}: {self.error}")
            self._publish()
            raise
        except BaseException:
            # Unexpected failures and cancellation still end the run
            self.is_running = False
            self._publish()
            raise

        tasks = [Task.from_step(task_id, step) for task_id, step in enumerate(steps)]
        run_id = self.scheduler.load_run(tasks)
        record_run_started()
        logger.info(f"Run {run_id} started for goal {goal!r}")

        self.scheduler.start()
        self._publish()
        return self.snapshot()

    async def wait_until_complete(self, timeout: Optional[float] = None) -> RunSnapshot:
        """
        Wait for the active run to finish and its pending pulses to settle.

        Raises:
            asyncio.TimeoutError: If the run does not complete in time
        """
        if self.is_running:
            await self.scheduler.wait_for_completion(timeout)
        await self.simulator.drain()
        return self.snapshot()

    async def shutdown(self) -> None:
        """Stop the scheduler loop and cancel all in-flight completions."""
        await self.scheduler.stop()
        self.simulator.cancel_all()
        self.is_running = False
        logger.info("Orchestrator shut down")

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener receiving a snapshot after every state change.

        Returns:
            Callable[[], None]: Function removing the listener
        """
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def snapshot(self) -> RunSnapshot:
        """Build a read-only view of the current run."""
        return RunSnapshot(
            run_id=self.scheduler.run_id,
            is_running=self.is_running,
            completed=self.scheduler.is_complete,
            error=self.error,
            queue_length=len(self.queue),
            workers=tuple(_worker_snapshot(w) for w in self.pool.workers),
            tasks=tuple(_task_snapshot(t) for t in self.scheduler.tasks),
        )

    def get_task(self, task_id: int) -> TaskSnapshot:
        """
        Raises:
            TaskNotFoundError: If the task is not part of the current run
        """
        return _task_snapshot(self.scheduler.get_task(task_id))

    def get_worker(self, worker_id: int) -> WorkerSnapshot:
        """
        Raises:
            WorkerNotFoundError: If the worker is not part of the pool
        """
        return _worker_snapshot(self.pool.get(worker_id))

    async def _hard_reset(self) -> None:
        await self.scheduler.stop()
        self.scheduler.reset()
        self.error = None
        self.goal = None

    def _on_run_completed(self, run_id: int) -> None:
        self.is_running = False
        logger.info(f"Run {run_id} finished")

    def _on_scheduler_failed(self, error: BaseException) -> None:
        self.simulator.cancel_all()
        self.is_running = False
        self.error = f"Scheduler stopped unexpectedly: {error}"
        logger.error(f"Run {self.scheduler.run_id} aborted: {error}")
        self._publish()

    def _publish(self) -> None:
        update_pool_metrics(self.pool.busy_count(), len(self.queue))
        if not self._subscribers:
            return

        snapshot = self.snapshot()
        for listener in list(self._subscribers):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}", exc_info=True)


def _worker_snapshot(worker: Worker) -> WorkerSnapshot:
    state = worker.target_state
    return WorkerSnapshot(
        id=worker.id,
        status=worker.status,
        target_state=TargetStateSnapshot(
            field_a=state.field_a,
            field_b=state.field_b,
            action_flag=state.action_flag,
        ),
    )


def _task_snapshot(task: Task) -> TaskSnapshot:
    return TaskSnapshot(
        id=task.id,
        description=task.description,
        action=task.action,
        selector=task.selector,
        value=task.value,
        status=task.status,
        assigned_worker=task.assigned_worker,
    )
