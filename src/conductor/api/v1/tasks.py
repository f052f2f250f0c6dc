"""Task API endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from conductor.api.deps import get_orchestrator
from conductor.api.schemas.run import TaskResponse
from conductor.api.schemas.response import StandardResponse, ResponseCodes
from conductor.core.exceptions import TaskNotFoundError
from conductor.services.orchestrator import Orchestrator

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=StandardResponse[List[TaskResponse]])
async def list_tasks(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[List[TaskResponse]]:
    """List tasks of the current run in plan order."""
    tasks = orchestrator.snapshot().tasks
    return StandardResponse(
        data=[TaskResponse.model_validate(t) for t in tasks],
        code=ResponseCodes.TASKS_LISTED,
        httpStatus="OK",
        description="Tasks retrieved successfully"
    )


@router.get("/{task_id}", response_model=StandardResponse[TaskResponse])
async def get_task(
    task_id: int,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[TaskResponse]:
    """Get task of the current run by id."""
    try:
        task = orchestrator.get_task(task_id)
        return StandardResponse(
            data=TaskResponse.model_validate(task),
            code=ResponseCodes.TASK_RETRIEVED,
            httpStatus="OK",
            description="Task retrieved successfully"
        )
    except TaskNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "data": None,
                "code": ResponseCodes.TASK_NOT_FOUND,
                "httpStatus": "NOT_FOUND",
                "description": str(e)
            },
        )
