"""Scheduler control loop assigning queued tasks to idle workers."""
import asyncio
import logging
from typing import Callable, List, Optional
from conductor.core.enums import TaskStatus
from conductor.core.exceptions import TaskNotFoundError
from conductor.models.task import Task
from conductor.models.worker import Worker
from conductor.observability.metrics import record_run_completed, record_task_assigned
from conductor.services.task_queue import TaskQueue
from conductor.services.worker_pool import WorkerPool
from conductor.worker.execution_simulator import ExecutionSimulator

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Single authority that assigns tasks and detects run completion.

    Each tick performs at most one assignment: the head of the queue goes to
    the idle worker with the lowest id. The periodic loop is bound to the
    current run and stops itself once the run completes.
    """

    def __init__(
        self,
        pool: WorkerPool,
        queue: TaskQueue,
        simulator: ExecutionSimulator,
        tick_interval: float = 0.2,
    ):
        """
        Initialize scheduler.

        Args:
            pool: Worker pool owned by this scheduler
            queue: Task queue owned by this scheduler
            simulator: Execution simulator resolving assignments
            tick_interval: Seconds between ticks
        """
        self.pool = pool
        self.queue = queue
        self.simulator = simulator
        self.tick_interval = tick_interval
        self.lock = simulator.lock

        # Run state
        self.run_id = 0
        self.tasks: List[Task] = []
        self.ticks = 0
        self._loaded = False
        self._completed = False
        self._completion_event = asyncio.Event()

        # Loop state
        self._tick_in_flight = False
        self._loop_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

        self._tick_listeners: List[Callable[[], None]] = []
        self._completion_listeners: List[Callable[[int], None]] = []
        self._failure_listeners: List[Callable[[BaseException], None]] = []

    @property
    def is_running(self) -> bool:
        """True while the periodic tick loop is alive."""
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def is_complete(self) -> bool:
        return self._completed

    def add_tick_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback invoked after every tick."""
        self._tick_listeners.append(listener)

    def add_completion_listener(self, listener: Callable[[int], None]) -> None:
        """Register a callback invoked once per run with the completed run id."""
        self._completion_listeners.append(listener)

    def add_failure_listener(self, listener: Callable[[BaseException], None]) -> None:
        """Register a callback invoked when the tick loop dies with an exception."""
        self._failure_listeners.append(listener)

    def reset(self) -> int:
        """
        Discard the current run and return workers to their initial state.

        Bumps the run id so completions scheduled for the old run are ignored.

        Returns:
            int: The new run id
        """
        self.run_id += 1
        self.simulator.begin_run(self.run_id)
        self.pool.reset()
        self.queue.clear()
        self.tasks = []
        self._loaded = False
        self._completed = False
        self._completion_event = asyncio.Event()
        return self.run_id

    def load_run(self, tasks: List[Task]) -> int:
        """
        Fill the current run with the given pending tasks.

        A run that already holds tasks is reset first, so the tasks always
        land in a fresh run. Otherwise the run opened by the last reset is
        reused and waiters on its completion stay valid.

        Args:
            tasks: Tasks in plan order, all PENDING

        Returns:
            int: Id of the run holding the tasks
        """
        if self._loaded:
            self.reset()
        run_id = self.run_id
        self.tasks = list(tasks)
        self.queue.enqueue_all(self.tasks)
        self._loaded = True
        logger.info(f"Run {run_id} loaded with {len(self.tasks)} tasks")
        return run_id

    def get_task(self, task_id: int) -> Task:
        """
        Get task of the current run by id.

        Raises:
            TaskNotFoundError: If the task is not part of the current run
        """
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(f"Task {task_id} not found")

    def all_terminal(self) -> bool:
        return all(task.is_terminal for task in self.tasks)

    async def tick(self) -> Optional[Task]:
        """
        Run one scheduling step.

        Returns:
            Optional[Task]: The task assigned during this tick, if any
        """
        if self._tick_in_flight:
            logger.debug("Tick already in flight, skipping")
            return None

        self._tick_in_flight = True
        try:
            async with self.lock:
                assigned = self._tick_locked()
        finally:
            self._tick_in_flight = False

        self.ticks += 1
        for listener in self._tick_listeners:
            listener()
        return assigned

    def _tick_locked(self) -> Optional[Task]:
        if self.queue.peek_if_assignable(self.pool) is not None:
            worker = self.pool.first_idle()
            task = self.queue.dequeue()
            self.assign(task, worker)
            return task

        if self._loaded and self.queue.is_empty() and self.all_terminal():
            self._signal_completion()
        return None

    def assign(self, task: Task, worker: Worker) -> None:
        """
        Bind a dequeued task to an idle worker and hand it to the simulator.

        Raises:
            InvalidAssignmentError: If the worker is not idle
            InvalidStateTransitionError: If the task is not PENDING
        """
        self.pool.mark_busy(worker.id)
        task.transition(TaskStatus.ACTIVE)
        task.assigned_worker = worker.id

        record_task_assigned(str(task.action))
        logger.info(f"Assigned task {task.id} ({task.action} {task.selector}) to worker {worker.id}")

        self.simulator.execute(task, worker, self.run_id)

    def _signal_completion(self) -> None:
        if self._completed:
            return

        self._completed = True
        self._completion_event.set()
        self._stop_event.set()
        record_run_completed()
        logger.info(f"Run {self.run_id} completed ({len(self.tasks)} tasks)")

        for listener in self._completion_listeners:
            listener(self.run_id)

    def start(self) -> None:
        """Start the periodic tick loop for the current run."""
        if self.is_running:
            logger.warning("Scheduler loop already running")
            return

        self._stop_event = asyncio.Event()
        self._loop_task = asyncio.get_running_loop().create_task(self._tick_loop())
        self._loop_task.add_done_callback(self._on_loop_done)
        logger.info(f"Scheduler started (interval: {self.tick_interval}s)")

    async def stop(self) -> None:
        """Stop the tick loop and wait for it to exit."""
        loop_task = self._loop_task
        if loop_task is None:
            return

        self._stop_event.set()
        self._loop_task = None
        if loop_task is not asyncio.current_task():
            await asyncio.gather(loop_task, return_exceptions=True)
        logger.info("Scheduler stopped")

    def _on_loop_done(self, loop_task: asyncio.Task) -> None:
        if loop_task.cancelled():
            return

        error = loop_task.exception()
        if error is None:
            return

        for listener in self._failure_listeners:
            listener(error)

    async def wait_for_completion(self, timeout: Optional[float] = None) -> None:
        """
        Wait until the current run completes.

        Raises:
            asyncio.TimeoutError: If the run does not complete in time
        """
        await asyncio.wait_for(self._completion_event.wait(), timeout=timeout)

    async def _tick_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Scheduler tick failed: {e}", exc_info=True)
                raise

            # Wait for next tick
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self.tick_interval,
                )
            except asyncio.TimeoutError:
                pass  # Normal timeout, continue loop
