"""Prometheus metrics for Conductor."""
from prometheus_client import Counter, Gauge, Histogram, Info


# Run metrics
runs_started_total = Counter(
    'conductor_runs_started_total',
    'Total number of runs started'
)

runs_completed_total = Counter(
    'conductor_runs_completed_total',
    'Total number of runs completed'
)

plan_generation_failures_total = Counter(
    'conductor_plan_generation_failures_total',
    'Total number of failed plan generations'
)

# Task metrics
tasks_assigned_total = Counter(
    'conductor_tasks_assigned_total',
    'Total number of tasks assigned to workers',
    ['action']
)

tasks_completed_total = Counter(
    'conductor_tasks_completed_total',
    'Total number of tasks completed',
    ['action']
)

task_duration_seconds = Histogram(
    'conductor_task_duration_seconds',
    'Simulated task execution duration in seconds',
    ['action'],
    buckets=[0.1, 0.25, 0.5, 1.0, 1.5, 2.0, 5.0, 10.0]
)

# Pool and queue metrics
workers_busy = Gauge(
    'conductor_workers_busy',
    'Number of busy workers'
)

queue_length = Gauge(
    'conductor_queue_length',
    'Number of tasks waiting in the queue'
)

# System info
system_info = Info(
    'conductor_system',
    'Conductor system information'
)


def update_pool_metrics(busy: int, queued: int) -> None:
    """
    Update worker and queue gauges.

    Args:
        busy: Number of busy workers
        queued: Number of tasks waiting in the queue
    """
    workers_busy.set(busy)
    queue_length.set(queued)


def record_run_started() -> None:
    """Record run start metric."""
    runs_started_total.inc()


def record_run_completed() -> None:
    """Record run completion metric."""
    runs_completed_total.inc()


def record_plan_generation_failed() -> None:
    """Record plan generation failure metric."""
    plan_generation_failures_total.inc()


def record_task_assigned(action: str) -> None:
    """Record task assignment metric."""
    tasks_assigned_total.labels(action=action).inc()


def record_task_completed(action: str, duration: float) -> None:
    """Record task completion metric."""
    tasks_completed_total.labels(action=action).inc()
    task_duration_seconds.labels(action=action).observe(duration)


def init_system_info(version: str) -> None:
    """
    Initialize system information metric.

    Args:
        version: Application version
    """
    system_info.info({
        'version': version,
        'name': 'Conductor'
    })
