"""Fixed-size pool of workers with deterministic idle lookup."""
from typing import Dict, List, Optional
from conductor.core.enums import WorkerStatus
from conductor.core.exceptions import InvalidAssignmentError, WorkerNotFoundError
from conductor.models.worker import TargetState, Worker


class WorkerPool:
    """
    Fixed-size set of workers with ids 1..N.

    The pool size is set at creation and never changes. Workers persist
    across runs and are reset to IDLE at run start.
    """

    def __init__(self, size: int):
        """
        Initialize worker pool.

        Args:
            size: Number of workers (must be >= 1)

        Raises:
            ValueError: If size is less than 1
        """
        if size < 1:
            raise ValueError(f"Worker pool size must be at least 1, got {size}")

        self._workers: Dict[int, Worker] = {
            worker_id: Worker(id=worker_id) for worker_id in range(1, size + 1)
        }

    @property
    def size(self) -> int:
        return len(self._workers)

    @property
    def workers(self) -> List[Worker]:
        """Workers ordered by ascending id."""
        return [self._workers[worker_id] for worker_id in sorted(self._workers)]

    def get(self, worker_id: int) -> Worker:
        """
        Get worker by id.

        Raises:
            WorkerNotFoundError: If worker id is not part of the pool
        """
        worker = self._workers.get(worker_id)
        if worker is None:
            raise WorkerNotFoundError(f"Worker {worker_id} not found")
        return worker

    def target_state(self, worker_id: int) -> TargetState:
        return self.get(worker_id).target_state

    def first_idle(self) -> Optional[Worker]:
        """
        Find the idle worker with the lowest id.

        Returns:
            Optional[Worker]: First idle worker, or None if all are busy
        """
        for worker in self.workers:
            if worker.is_idle:
                return worker
        return None

    def has_idle(self) -> bool:
        return self.first_idle() is not None

    def busy_count(self) -> int:
        return sum(1 for worker in self._workers.values() if not worker.is_idle)

    def mark_busy(self, worker_id: int) -> Worker:
        """
        Mark an idle worker as busy.

        Raises:
            InvalidAssignmentError: If the worker is already busy
        """
        worker = self.get(worker_id)
        if not worker.is_idle:
            raise InvalidAssignmentError(f"Worker {worker_id} is already busy")
        worker.status = WorkerStatus.BUSY
        return worker

    def mark_idle(self, worker_id: int) -> Worker:
        worker = self.get(worker_id)
        worker.status = WorkerStatus.IDLE
        return worker

    def reset(self) -> None:
        """Set every worker IDLE and clear its target state."""
        for worker in self._workers.values():
            worker.status = WorkerStatus.IDLE
            worker.target_state.reset()
