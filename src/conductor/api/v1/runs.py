"""Run API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from conductor.api.deps import get_orchestrator
from conductor.api.schemas.run import GoalSubmit, RunResponse
from conductor.api.schemas.response import StandardResponse, ResponseCodes
from conductor.core.exceptions import GenerationError, RunAlreadyActiveError
from conductor.services.orchestrator import Orchestrator

router = APIRouter()


@router.post("/runs", response_model=StandardResponse[RunResponse], status_code=status.HTTP_201_CREATED)
async def submit_goal(
    goal_data: GoalSubmit,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[RunResponse]:
    """
    Submit a goal and start a run.

    - Rejected while another run is active
    - Plan generation failures are reported and no run starts
    """
    try:
        snapshot = await orchestrator.submit_goal(goal_data.goal)
        return StandardResponse(
            data=RunResponse.model_validate(snapshot),
            code=ResponseCodes.RUN_STARTED,
            httpStatus="CREATED",
            description="Run started successfully"
        )
    except RunAlreadyActiveError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "data": None,
                "code": ResponseCodes.RUN_ALREADY_ACTIVE,
                "httpStatus": "CONFLICT",
                "description": str(e)
            },
        )
    except GenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "data": None,
                "code": ResponseCodes.PLAN_GENERATION_FAILED,
                "httpStatus": "BAD_GATEWAY",
                "description": str(e)
            },
        )


@router.get("/runs/current", response_model=StandardResponse[RunResponse])
async def get_current_run(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> StandardResponse[RunResponse]:
    """
    Get the current run.

    Returns workers, tasks and target states as of now.
    """
    return StandardResponse(
        data=RunResponse.model_validate(orchestrator.snapshot()),
        code=ResponseCodes.RUN_RETRIEVED,
        httpStatus="OK",
        description="Run retrieved successfully"
    )
