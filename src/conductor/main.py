"""FastAPI application factory."""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from conductor.config import Settings, get_settings
from conductor.api.v1 import runs, tasks, workers, health, metrics
from conductor.observability.metrics import init_system_info
from conductor.observability.middleware import MetricsMiddleware
from conductor.services.orchestrator import Orchestrator
from conductor.services.plan_source import PlanSource


def create_app(
    settings: Optional[Settings] = None,
    plan_source: Optional[PlanSource] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings override (defaults to environment settings)
        plan_source: Plan source override (defaults to one built from settings)

    Returns:
        FastAPI: Configured FastAPI application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.orchestrator = Orchestrator.from_settings(settings, plan_source=plan_source)
        try:
            yield
        finally:
            await app.state.orchestrator.shutdown()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(MetricsMiddleware, metrics_path=f"{settings.API_V1_PREFIX}/metrics")

    # Initialize metrics
    init_system_info(settings.APP_VERSION)

    # Include routers
    app.include_router(runs.router, prefix=settings.API_V1_PREFIX, tags=["runs"])
    app.include_router(health.router, prefix=settings.API_V1_PREFIX, tags=["health"])
    app.include_router(tasks.router, prefix=settings.API_V1_PREFIX)
    app.include_router(workers.router, prefix=settings.API_V1_PREFIX)
    app.include_router(metrics.router, prefix=settings.API_V1_PREFIX)

    return app


# Create app instance
app = create_app()
