"""Execution simulator resolving task assignments after a fixed latency."""
import asyncio
import logging
import time
from typing import Callable, Coroutine, List, Optional, Set
from conductor.core.enums import TaskStatus, WorkerStatus
from conductor.models.task import Task
from conductor.models.worker import TargetState, Worker
from conductor.observability.metrics import record_task_completed
from conductor.worker.effect_registry import EffectRegistry
from conductor.worker.models import EffectResult, ExecutionResult

logger = logging.getLogger(__name__)


class ExecutionSimulator:
    """
    Simulates task execution by applying effects after a delay.

    Every completion is tagged with the run id it was scheduled for and is
    discarded if the run has been reset in the meantime. Mutations happen
    under the shared lock so they are atomic with respect to scheduler ticks.
    """

    def __init__(
        self,
        registry: EffectRegistry,
        execution_delay: float = 1.5,
        pulse_duration: float = 0.5,
        lock: Optional[asyncio.Lock] = None,
    ):
        """
        Initialize execution simulator.

        Args:
            registry: Registry of (action, selector) → effect mappings
            execution_delay: Seconds before an assignment completes
            pulse_duration: Seconds before a click pulse is cleared
            lock: Lock shared with the scheduler
        """
        self.registry = registry
        self.execution_delay = execution_delay
        self.pulse_duration = pulse_duration
        self.lock = lock or asyncio.Lock()

        self._run_id = 0
        self._pending: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[], None]] = []

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def in_flight(self) -> int:
        """Number of scheduled completions and pulse resets not yet fired."""
        return len(self._pending)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback invoked after every state mutation."""
        self._listeners.append(listener)

    def begin_run(self, run_id: int) -> None:
        """
        Invalidate all completions scheduled for earlier runs.

        Args:
            run_id: Identifier of the run that becomes current
        """
        self.cancel_all()
        self._run_id = run_id

    def execute(self, task: Task, worker: Worker, run_id: int) -> asyncio.Task:
        """
        Schedule completion of an assignment without blocking the caller.

        Args:
            task: Active task to resolve
            worker: Busy worker executing the task
            run_id: Run the assignment belongs to

        Returns:
            asyncio.Task: Handle of the scheduled completion
        """
        return self._spawn(self._complete_after_delay(task, worker, run_id))

    async def drain(self) -> None:
        """
        Wait for every scheduled completion and pulse reset to fire.

        Raises:
            Exception: The first error raised by a completion, if any
        """
        while self._pending:
            results = await asyncio.gather(*list(self._pending), return_exceptions=True)
            for result in results:
                if isinstance(result, Exception) and not isinstance(result, asyncio.CancelledError):
                    raise result

    def cancel_all(self) -> None:
        """Cancel every scheduled completion and pulse reset."""
        if self._pending:
            logger.info(f"Cancelling {len(self._pending)} in-flight completions")
        for pending in list(self._pending):
            pending.cancel()
        self._pending.clear()

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _complete_after_delay(
        self, task: Task, worker: Worker, run_id: int
    ) -> Optional[ExecutionResult]:
        started_at = time.monotonic()
        await asyncio.sleep(self.execution_delay)

        async with self.lock:
            if run_id != self._run_id:
                logger.warning(
                    f"Discarding stale completion of task {task.id} from run {run_id}"
                )
                return None

            effect = self._apply_effect(task, worker.target_state)
            task.transition(TaskStatus.COMPLETED)
            worker.status = WorkerStatus.IDLE

        duration = time.monotonic() - started_at
        record_task_completed(str(task.action), duration)
        logger.info(f"Task {task.id} completed on worker {worker.id}")

        if effect.pulse:
            self._spawn(self._reset_pulse(worker.target_state, run_id))

        self._notify()
        return ExecutionResult(
            task_id=task.id,
            worker_id=worker.id,
            run_id=run_id,
            duration=duration,
            effect=effect,
        )

    def _apply_effect(self, task: Task, state: TargetState) -> EffectResult:
        if not self.registry.has_handler(task.action, task.selector):
            logger.debug(f"No effect for {task.action} on '{task.selector}', skipping")
            return EffectResult(applied=False)

        handler = self.registry.get_handler(task.action, task.selector)
        return handler(state, task.value)

    async def _reset_pulse(self, state: TargetState, run_id: int) -> None:
        await asyncio.sleep(self.pulse_duration)

        async with self.lock:
            if run_id != self._run_id:
                return
            state.action_flag = False

        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()
