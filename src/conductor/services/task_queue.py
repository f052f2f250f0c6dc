"""In-memory FIFO queue of tasks awaiting assignment."""
from collections import deque
from typing import Deque, Iterable, List, Optional
from conductor.core.exceptions import EmptyQueueError
from conductor.models.task import Task
from conductor.services.worker_pool import WorkerPool


class TaskQueue:
    """
    FIFO queue holding the not-yet-dispatched tasks of a run.

    Order is plan order; tasks are never reordered by worker availability.
    """

    def __init__(self):
        """Initialize empty task queue."""
        self._tasks: Deque[Task] = deque()

    def enqueue_all(self, tasks: Iterable[Task]) -> None:
        """
        Replace queue contents with the given tasks, preserving order.

        Args:
            tasks: Ordered tasks of a new run
        """
        self._tasks = deque(tasks)

    def peek_if_assignable(self, pool: WorkerPool) -> Optional[Task]:
        """
        View head task without removing it, but only if a worker is idle.

        Args:
            pool: Worker pool to check for idle workers

        Returns:
            Optional[Task]: Head task, or None if queue empty or no idle worker
        """
        if not self._tasks or not pool.has_idle():
            return None
        return self._tasks[0]

    def dequeue(self) -> Task:
        """
        Remove and return the head task.

        Returns:
            Task: Head of the queue

        Raises:
            EmptyQueueError: If the queue is empty
        """
        if not self._tasks:
            raise EmptyQueueError("Cannot dequeue from an empty task queue")
        return self._tasks.popleft()

    def is_empty(self) -> bool:
        return not self._tasks

    def pending_ids(self) -> List[int]:
        return [task.id for task in self._tasks]

    def clear(self) -> None:
        """Delete all tasks from the queue."""
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._tasks)
