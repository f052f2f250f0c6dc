"""CLI entry point for running a goal against the worker pool."""
import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional, Sequence
from conductor.config import get_settings
from conductor.core.exceptions import GenerationError
from conductor.models.snapshot import RunSnapshot
from conductor.services.orchestrator import Orchestrator

DEFAULT_GOAL = "Log in with username 'admin' and password 'password123'"

logger = logging.getLogger(__name__)


def format_summary(snapshot: RunSnapshot) -> str:
    """
    Render a run snapshot as plain text.

    Args:
        snapshot: Snapshot to render

    Returns:
        str: One line per worker and per task
    """
    lines = [f"Run {snapshot.run_id}: {'running' if snapshot.is_running else 'idle'}"]
    if snapshot.error:
        lines.append(f"Error: {snapshot.error}")

    for worker in snapshot.workers:
        state = worker.target_state
        lines.append(
            f"  Worker #{worker.id} [{worker.status}] "
            f"field_a={state.field_a!r} field_b={state.field_b!r} action_flag={state.action_flag}"
        )

    for task in snapshot.tasks:
        assigned = f" (worker #{task.assigned_worker})" if task.assigned_worker is not None else ""
        lines.append(f"  Task {task.id} [{task.status}] {task.description}{assigned}")

    return "\n".join(lines)


async def run_goal(goal: str, timeout: Optional[float] = None) -> int:
    """
    Submit a goal and wait for the run to finish.

    Args:
        goal: Automation goal
        timeout: Optional limit in seconds for the whole run

    Returns:
        int: Process exit code
    """
    settings = get_settings()
    orchestrator = Orchestrator.from_settings(settings)

    # Log only status changes, not every tick
    last_seen = {}

    def on_snapshot(snapshot: RunSnapshot) -> None:
        current = {task.id: task.status for task in snapshot.tasks}
        if current != last_seen:
            last_seen.clear()
            last_seen.update(current)
            busy = snapshot.busy_workers
            logger.info(f"{busy} busy workers, {snapshot.queue_length} queued tasks")

    orchestrator.subscribe(on_snapshot)

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()
    run_task = asyncio.current_task()

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        loop.call_soon_threadsafe(run_task.cancel)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        await orchestrator.submit_goal(goal)
        snapshot = await orchestrator.wait_until_complete(timeout=timeout)
    except GenerationError as e:
        logger.error(f"Plan generation failed: {e}")
        print(format_summary(orchestrator.snapshot()))
        return 1
    except asyncio.TimeoutError:
        logger.error(f"Run did not complete within {timeout}s")
        print(format_summary(orchestrator.snapshot()))
        return 1
    except asyncio.CancelledError:
        logger.info("Run interrupted")
        return 130
    finally:
        await orchestrator.shutdown()

    print(format_summary(snapshot))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conductor-run",
        description="Generate a plan for a goal and execute it on the worker pool.",
    )
    parser.add_argument("goal", nargs="?", default=DEFAULT_GOAL, help="Automation goal")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds")
    return parser


def main(argv: Optional[Sequence[str]] = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        exit_code = asyncio.run(run_goal(args.goal, timeout=args.timeout))
    except Exception as e:
        logger.error(f"Run error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
