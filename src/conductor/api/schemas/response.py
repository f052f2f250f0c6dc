"""Standard API response schemas."""
from typing import Any, Optional, Generic, TypeVar
from pydantic import BaseModel, Field

T = TypeVar('T')


class StandardResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T = Field(..., description="Response data")
    code: str = Field(..., description="Response code")
    httpStatus: str = Field(..., description="HTTP status text")
    description: str = Field(..., description="Response description")

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """Standard error response."""

    data: Optional[Any] = Field(None, description="Error details")
    code: str = Field(..., description="Error code")
    httpStatus: str = Field(..., description="HTTP status text")
    description: str = Field(..., description="Error description")

    model_config = {"from_attributes": True}


# Response codes
class ResponseCodes:
    """Standard response codes."""

    # Success codes (2xx)
    RUN_STARTED = "RUN_0001"
    RUN_RETRIEVED = "RUN_0002"

    TASK_RETRIEVED = "TASK_0001"
    TASKS_LISTED = "TASK_0002"

    WORKER_RETRIEVED = "WORKER_0001"
    WORKERS_LISTED = "WORKER_0002"

    HEALTH_OK = "HEALTH_0001"

    # Error codes (4xx, 5xx)
    RUN_ALREADY_ACTIVE = "RUN_4001"
    PLAN_GENERATION_FAILED = "RUN_5001"

    TASK_NOT_FOUND = "TASK_4001"
    WORKER_NOT_FOUND = "WORKER_4001"

    VALIDATION_ERROR = "ERR_4001"
    INTERNAL_ERROR = "ERR_5001"
