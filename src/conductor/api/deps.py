"""API dependencies for FastAPI."""
from fastapi import Request
from conductor.services.orchestrator import Orchestrator


def get_orchestrator(request: Request) -> Orchestrator:
    """
    Dependency to get the application's orchestrator.

    Returns:
        Orchestrator: Orchestrator created in the app lifespan
    """
    return request.app.state.orchestrator
