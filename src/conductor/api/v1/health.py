"""Health check API endpoint."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from conductor.api.deps import get_orchestrator
from conductor.api.schemas.response import StandardResponse, ResponseCodes
from conductor.services.orchestrator import Orchestrator

router = APIRouter()


class HealthData(BaseModel):
    """Health check data model."""

    status: str
    pool_size: int
    busy_workers: int
    is_running: bool
    scheduler: str


@router.get("/health", response_model=StandardResponse[HealthData])
async def health_check(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[HealthData]:
    """
    Health check endpoint.

    Returns:
        StandardResponse: Service health including pool and scheduler state
    """
    snapshot = orchestrator.snapshot()

    health_data = HealthData(
        status="healthy",
        pool_size=len(snapshot.workers),
        busy_workers=snapshot.busy_workers,
        is_running=snapshot.is_running,
        scheduler="ticking" if orchestrator.scheduler.is_running else "idle",
    )

    return StandardResponse(
        data=health_data,
        code=ResponseCodes.HEALTH_OK,
        httpStatus="OK",
        description="Health check completed successfully",
    )
