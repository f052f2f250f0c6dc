"""Plan step schema returned by plan sources."""
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from conductor.core.enums import StepAction


class PlanStep(BaseModel):
    """
    A single action descriptor produced by a plan source.

    ``step`` is the human-readable description; ``description`` is accepted
    as an alias. ``value`` is only meaningful for ``type`` actions.
    """

    step: str = Field(..., validation_alias=AliasChoices("step", "description"), description="Human-readable description")
    action: StepAction = Field(..., description="Browser action to perform")
    selector: str = Field(..., min_length=1, description="CSS selector of the target element")
    value: Optional[str] = Field(default=None, description="Text to type (type actions only)")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"step": "Type the username", "action": "type", "selector": "#username", "value": "admin"},
                {"step": "Click the login button", "action": "click", "selector": ".btn-login"},
            ]
        },
    )
