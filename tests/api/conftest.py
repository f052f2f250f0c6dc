"""Fixtures for API tests."""
import time
from contextlib import ExitStack
import pytest
from fastapi.testclient import TestClient
from conductor.main import create_app
from conductor.services.plan_source import StaticPlanSource


@pytest.fixture
def make_client(fast_settings, login_steps):
    """
    Factory creating FastAPI test clients around a static plan source.

    Each client runs the app lifespan, so the orchestrator lives on the
    client's event loop and is shut down on exit.
    """
    with ExitStack() as stack:

        def factory(steps=None, error=None, **setting_overrides):
            settings = fast_settings.model_copy(update=setting_overrides)
            plan_source = StaticPlanSource(login_steps if steps is None else steps, error=error)
            app = create_app(settings=settings, plan_source=plan_source)
            return stack.enter_context(TestClient(app))

        yield factory


@pytest.fixture
def client(make_client):
    """Test client serving the login plan."""
    return make_client()


@pytest.fixture
def wait_for_idle():
    """Poll the current run until it stops running."""

    def wait(client: TestClient, timeout: float = 5.0) -> dict:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            data = client.get("/api/v1/runs/current").json()["data"]
            if not data["is_running"]:
                return data
            time.sleep(0.02)
        raise AssertionError("Run did not finish in time")

    return wait
