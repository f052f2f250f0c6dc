"""Worker API endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from conductor.api.deps import get_orchestrator
from conductor.api.schemas.run import WorkerResponse
from conductor.api.schemas.response import StandardResponse, ResponseCodes
from conductor.core.exceptions import WorkerNotFoundError
from conductor.services.orchestrator import Orchestrator

router = APIRouter(prefix="/workers", tags=["workers"])


@router.get("", response_model=StandardResponse[List[WorkerResponse]])
async def list_workers(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[List[WorkerResponse]]:
    """List all workers with their status and target state."""
    workers = orchestrator.snapshot().workers
    return StandardResponse(
        data=[WorkerResponse.model_validate(w) for w in workers],
        code=ResponseCodes.WORKERS_LISTED,
        httpStatus="OK",
        description="Workers retrieved successfully"
    )


@router.get("/{worker_id}", response_model=StandardResponse[WorkerResponse])
async def get_worker(
    worker_id: int,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[WorkerResponse]:
    """
    Get worker details by ID.
    """
    try:
        worker = orchestrator.get_worker(worker_id)
        return StandardResponse(
            data=WorkerResponse.model_validate(worker),
            code=ResponseCodes.WORKER_RETRIEVED,
            httpStatus="OK",
            description="Worker retrieved successfully"
        )
    except WorkerNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "data": None,
                "code": ResponseCodes.WORKER_NOT_FOUND,
                "httpStatus": "NOT_FOUND",
                "description": str(e)
            },
        )
