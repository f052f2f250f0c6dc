"""Custom exceptions for Conductor."""


class ConductorException(Exception):
    """Base exception for all Conductor-specific exceptions."""

    pass


class InvalidStateTransitionError(ConductorException):
    """Raised when attempting an invalid task state transition."""

    pass


class EmptyQueueError(ConductorException):
    """Raised when dequeuing from an empty task queue."""

    pass


class InvalidAssignmentError(ConductorException):
    """Raised when a task is assigned to a worker that is not idle."""

    pass


class GenerationError(ConductorException):
    """Raised when the plan source fails or returns an invalid plan."""

    pass


class RunAlreadyActiveError(ConductorException):
    """Raised when a goal is submitted while another run is active."""

    pass


class WorkerNotFoundError(ConductorException):
    """Raised when a worker id is not part of the pool."""

    pass


class TaskNotFoundError(ConductorException):
    """Raised when a task id is not part of the current run."""

    pass
