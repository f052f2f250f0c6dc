"""Shared pytest fixtures for all tests."""
import pytest
from conductor.config import Settings, get_settings
from conductor.services.orchestrator import Orchestrator
from conductor.services.plan_source import LOGIN_PLAN, StaticPlanSource

LOGIN_GOAL = "Log in with username 'admin' and password 'password123'"


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """
    Reset the cached settings before and after each test.

    Tests that tweak environment variables get a fresh Settings instance.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fast_settings():
    """
    Settings with timings shrunk so a full run takes a fraction of a second.
    """
    return Settings(
        WORKER_POOL_SIZE=4,
        SCHEDULER_TICK_INTERVAL=0.01,
        TASK_EXECUTION_DELAY=0.05,
        CLICK_PULSE_DURATION=0.02,
        GEMINI_API_KEY=None,
    )


@pytest.fixture
def login_steps():
    """The three-step login plan as plain dicts."""
    return [dict(step) for step in LOGIN_PLAN]


@pytest.fixture
def make_orchestrator(fast_settings, login_steps):
    """
    Factory building orchestrators with fast timings.

    Must be called from inside a running event loop.
    """

    def factory(steps=None, error=None, **overrides):
        plan_source = StaticPlanSource(login_steps if steps is None else steps, error=error)
        options = {
            "pool_size": fast_settings.WORKER_POOL_SIZE,
            "tick_interval": fast_settings.SCHEDULER_TICK_INTERVAL,
            "execution_delay": fast_settings.TASK_EXECUTION_DELAY,
            "pulse_duration": fast_settings.CLICK_PULSE_DURATION,
        }
        options.update(overrides)
        return Orchestrator(plan_source, **options)

    return factory
