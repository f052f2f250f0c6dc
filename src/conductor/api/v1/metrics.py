"""Prometheus metrics endpoint."""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from conductor.api.deps import get_orchestrator
from conductor.observability.metrics import update_pool_metrics
from conductor.services.orchestrator import Orchestrator


router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse)
def get_metrics(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    # Update gauge metrics before returning
    update_pool_metrics(orchestrator.pool.busy_count(), len(orchestrator.queue))

    return PlainTextResponse(
        content=generate_latest().decode('utf-8'),
        media_type=CONTENT_TYPE_LATEST
    )
