"""Integration tests for full runs through the Orchestrator."""
import asyncio
import pytest
from conductor.core.enums import TaskStatus, WorkerStatus
from conductor.core.exceptions import GenerationError, RunAlreadyActiveError
from conductor.services.plan_source import StaticPlanSource

LOGIN_GOAL = "Log in with username 'admin' and password 'password123'"


class DelayedPlanSource(StaticPlanSource):
    """Static plan source that takes a while to answer."""

    def __init__(self, steps, delay):
        super().__init__(steps)
        self.delay = delay

    async def generate_plan(self, goal):
        await asyncio.sleep(self.delay)
        return await super().generate_plan(goal)


def worker_for(snapshot, task):
    return next(w for w in snapshot.workers if w.id == task.assigned_worker)


def check_invariants(snapshot, pool_size):
    """Assert the busy/active pairing and FIFO prefix invariants."""
    assert snapshot.busy_workers <= pool_size

    active = [t for t in snapshot.tasks if t.status == TaskStatus.ACTIVE]
    assert snapshot.busy_workers == len(active)
    for worker in snapshot.workers:
        mine = [t for t in active if t.assigned_worker == worker.id]
        assert len(mine) == (1 if worker.status == WorkerStatus.BUSY else 0)

    # Dispatched tasks always form a prefix of the plan
    dispatched = [t.id for t in snapshot.tasks if t.status != TaskStatus.PENDING]
    assert dispatched == list(range(len(dispatched)))


@pytest.mark.integration
@pytest.mark.asyncio
class TestLoginRun:
    """Test the login plan end to end."""

    async def test_login_round_trip(self, make_orchestrator):
        orchestrator = make_orchestrator()

        started = await orchestrator.submit_goal(LOGIN_GOAL)
        assert started.is_running is True
        assert [t.status for t in started.tasks] == [TaskStatus.PENDING] * 3

        snapshot = await orchestrator.wait_until_complete(timeout=5)

        assert snapshot.is_running is False
        assert snapshot.completed is True
        assert snapshot.error is None
        assert all(t.status == TaskStatus.COMPLETED for t in snapshot.tasks)

        username, password, click = snapshot.tasks
        assert worker_for(snapshot, username).target_state.field_a == "admin"
        assert worker_for(snapshot, password).target_state.field_b == "password123"
        assert worker_for(snapshot, click).target_state.action_flag is False
        assert all(w.status == WorkerStatus.IDLE for w in snapshot.workers)
        await orchestrator.shutdown()

    async def test_tasks_spread_across_idle_workers(self, make_orchestrator):
        """Test consecutive ticks pick the lowest idle worker ids."""
        orchestrator = make_orchestrator(execution_delay=0.2)

        await orchestrator.submit_goal(LOGIN_GOAL)
        snapshot = await orchestrator.wait_until_complete(timeout=5)

        assert [t.assigned_worker for t in snapshot.tasks] == [1, 2, 3]
        await orchestrator.shutdown()

    async def test_click_flag_observed_during_pulse(self, make_orchestrator):
        orchestrator = make_orchestrator(pulse_duration=0.2)
        flags = []
        orchestrator.subscribe(lambda s: flags.append(any(w.target_state.action_flag for w in s.workers)))

        await orchestrator.submit_goal(LOGIN_GOAL)
        await orchestrator.wait_until_complete(timeout=5)

        assert True in flags
        assert flags[-1] is False
        await orchestrator.shutdown()


@pytest.mark.integration
@pytest.mark.asyncio
class TestSchedulingProperties:
    """Test scheduling invariants observed through snapshots."""

    async def test_invariants_hold_on_every_snapshot(self, make_orchestrator, login_steps):
        steps = login_steps * 3
        orchestrator = make_orchestrator(steps=steps, pool_size=2)
        snapshots = []
        orchestrator.subscribe(snapshots.append)

        await orchestrator.submit_goal("repeat")
        final = await orchestrator.wait_until_complete(timeout=10)

        assert len(snapshots) > len(steps)
        for snapshot in snapshots:
            check_invariants(snapshot, pool_size=2)
        assert max(s.busy_workers for s in snapshots) == 2
        assert all(t.status == TaskStatus.COMPLETED for t in final.tasks)
        await orchestrator.shutdown()

    async def test_single_worker_runs_tasks_serially(self, make_orchestrator):
        orchestrator = make_orchestrator(pool_size=1)
        snapshots = []
        orchestrator.subscribe(snapshots.append)

        await orchestrator.submit_goal(LOGIN_GOAL)
        final = await orchestrator.wait_until_complete(timeout=5)

        for snapshot in snapshots:
            active = [t for t in snapshot.tasks if t.status == TaskStatus.ACTIVE]
            assert len(active) <= 1
        assert {t.assigned_worker for t in final.tasks} == {1}
        await orchestrator.shutdown()

    async def test_completion_is_stable(self, make_orchestrator):
        """Test a completed run stays completed and terminal."""
        orchestrator = make_orchestrator()

        await orchestrator.submit_goal(LOGIN_GOAL)
        await orchestrator.wait_until_complete(timeout=5)
        for _ in range(3):
            await orchestrator.scheduler.tick()
        snapshot = orchestrator.snapshot()

        assert snapshot.completed is True
        assert snapshot.queue_length == 0
        assert all(t.status == TaskStatus.COMPLETED for t in snapshot.tasks)
        assert snapshot.is_running is False
        await orchestrator.shutdown()

    async def test_errored_status_never_produced(self, make_orchestrator, login_steps):
        steps = login_steps + [{"step": "Click nowhere", "action": "click", "selector": "#missing"}]
        orchestrator = make_orchestrator(steps=steps)

        await orchestrator.submit_goal("goal")
        snapshot = await orchestrator.wait_until_complete(timeout=5)

        assert all(t.status == TaskStatus.COMPLETED for t in snapshot.tasks)
        await orchestrator.shutdown()


@pytest.mark.integration
@pytest.mark.asyncio
class TestPlanIngestion:
    """Test goal submission, failures and resets."""

    async def test_failing_plan_source(self, make_orchestrator):
        orchestrator = make_orchestrator(error="model unavailable")

        with pytest.raises(GenerationError):
            await orchestrator.submit_goal(LOGIN_GOAL)
        snapshot = orchestrator.snapshot()

        assert snapshot.error == "model unavailable"
        assert snapshot.is_running is False
        assert snapshot.tasks == ()
        assert all(w.status == WorkerStatus.IDLE for w in snapshot.workers)
        assert orchestrator.scheduler.is_running is False

    async def test_empty_plan_completes(self, make_orchestrator):
        orchestrator = make_orchestrator(steps=[])

        await orchestrator.submit_goal("nothing to do")
        snapshot = await orchestrator.wait_until_complete(timeout=5)

        assert snapshot.is_running is False
        assert snapshot.completed is True
        assert snapshot.tasks == ()
        await orchestrator.shutdown()

    async def test_submit_rejected_while_running(self, make_orchestrator):
        orchestrator = make_orchestrator(execution_delay=10)

        await orchestrator.submit_goal(LOGIN_GOAL)

        with pytest.raises(RunAlreadyActiveError):
            await orchestrator.submit_goal("another goal")
        assert orchestrator.plan_source.calls == [LOGIN_GOAL]
        await orchestrator.shutdown()

    async def test_new_goal_resets_previous_run(self, make_orchestrator):
        orchestrator = make_orchestrator()

        await orchestrator.submit_goal(LOGIN_GOAL)
        first = await orchestrator.wait_until_complete(timeout=5)
        second = await orchestrator.submit_goal(LOGIN_GOAL)

        assert second.run_id > first.run_id
        assert second.completed is False
        assert all(t.status == TaskStatus.PENDING for t in second.tasks)
        assert all(w.target_state.field_a == "" for w in second.workers)
        await orchestrator.wait_until_complete(timeout=5)
        await orchestrator.shutdown()

    async def test_failure_after_success_clears_previous_run(self, make_orchestrator):
        orchestrator = make_orchestrator()
        await orchestrator.submit_goal(LOGIN_GOAL)
        await orchestrator.wait_until_complete(timeout=5)

        orchestrator.plan_source.error = "quota exceeded"
        with pytest.raises(GenerationError):
            await orchestrator.submit_goal(LOGIN_GOAL)
        snapshot = orchestrator.snapshot()

        assert snapshot.tasks == ()
        assert snapshot.error == "quota exceeded"
        assert all(w.target_state.field_a == "" for w in snapshot.workers)

    async def test_shutdown_leaves_no_orphaned_completions(self, make_orchestrator):
        orchestrator = make_orchestrator(execution_delay=0.05)
        await orchestrator.submit_goal(LOGIN_GOAL)
        await asyncio.sleep(0.02)

        await orchestrator.shutdown()
        await asyncio.sleep(0.1)

        assert orchestrator.simulator.in_flight == 0
        assert orchestrator.is_running is False

    async def test_unsubscribe_stops_notifications(self, make_orchestrator):
        orchestrator = make_orchestrator()
        received = []
        unsubscribe = orchestrator.subscribe(received.append)
        unsubscribe()

        await orchestrator.submit_goal(LOGIN_GOAL)
        await orchestrator.wait_until_complete(timeout=5)

        assert received == []
        await orchestrator.shutdown()


@pytest.mark.integration
@pytest.mark.asyncio
class TestRunRecovery:
    """Test runs recover from slow sources, cancellation and listener failures."""

    async def test_waiter_started_during_generation_sees_completion(self, make_orchestrator, login_steps):
        orchestrator = make_orchestrator()
        orchestrator.plan_source = DelayedPlanSource(login_steps, delay=0.1)

        submit = asyncio.create_task(orchestrator.submit_goal(LOGIN_GOAL))
        await asyncio.sleep(0.02)
        assert orchestrator.is_running is True
        generating_run = orchestrator.snapshot().run_id

        snapshot = await orchestrator.wait_until_complete(timeout=2)
        started = await submit

        assert snapshot.completed is True
        assert all(t.status == TaskStatus.COMPLETED for t in snapshot.tasks)
        assert started.run_id == generating_run
        assert snapshot.run_id == generating_run
        await orchestrator.shutdown()

    async def test_cancelled_submit_releases_run(self, make_orchestrator, login_steps):
        orchestrator = make_orchestrator()
        orchestrator.plan_source = DelayedPlanSource(login_steps, delay=1)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(orchestrator.submit_goal(LOGIN_GOAL), timeout=0.02)

        assert orchestrator.is_running is False
        assert orchestrator.scheduler.is_running is False

        orchestrator.plan_source = StaticPlanSource(login_steps)
        await orchestrator.submit_goal(LOGIN_GOAL)
        snapshot = await orchestrator.wait_until_complete(timeout=5)
        assert snapshot.completed is True
        await orchestrator.shutdown()

    async def test_failing_subscriber_does_not_stall_run(self, make_orchestrator):
        orchestrator = make_orchestrator()
        calls = []

        def flaky_listener(snapshot):
            calls.append(snapshot)
            if len(calls) == 3:
                raise RuntimeError("listener failed")

        orchestrator.subscribe(flaky_listener)

        await orchestrator.submit_goal(LOGIN_GOAL)
        snapshot = await orchestrator.wait_until_complete(timeout=5)

        assert len(calls) > 3
        assert snapshot.completed is True
        assert snapshot.is_running is False
        assert all(t.status == TaskStatus.COMPLETED for t in snapshot.tasks)

        await orchestrator.submit_goal(LOGIN_GOAL)
        await orchestrator.wait_until_complete(timeout=5)
        await orchestrator.shutdown()

    async def test_dead_tick_loop_ends_run(self, make_orchestrator):
        orchestrator = make_orchestrator(execution_delay=10)

        def broken_tick_listener():
            raise RuntimeError("tick listener failed")

        orchestrator.scheduler.add_tick_listener(broken_tick_listener)

        await orchestrator.submit_goal(LOGIN_GOAL)
        for _ in range(50):
            if not orchestrator.is_running:
                break
            await asyncio.sleep(0.01)

        snapshot = orchestrator.snapshot()
        assert snapshot.is_running is False
        assert "tick listener failed" in snapshot.error
        assert orchestrator.simulator.in_flight == 0
        await orchestrator.shutdown()
