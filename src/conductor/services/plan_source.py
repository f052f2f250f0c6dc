"""Plan sources turning a goal string into an ordered list of plan steps."""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
import httpx
from pydantic import TypeAdapter, ValidationError
from conductor.config import Settings
from conductor.core.enums import StepAction
from conductor.core.exceptions import GenerationError
from conductor.models.plan import PlanStep

logger = logging.getLogger(__name__)

GENERATION_ERROR_MESSAGE = (
    "Failed to generate a valid automation plan from the AI. Please try a different goal."
)

PLAN_PROMPT_TEMPLATE = """
Based on the following user goal, generate a step-by-step browser automation plan in JSON format.
The actions should be limited to 'type' and 'click'.
The selectors must be valid CSS selectors.
For a login form, use '#username' for the username field, '#password' for the password field, and '.btn-login' for the login button.

Goal: "{goal}"
"""

PLAN_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "step": {
                "type": "STRING",
                "description": "A human-readable description of the action.",
            },
            "action": {
                "type": "STRING",
                "enum": [StepAction.TYPE.value, StepAction.CLICK.value],
                "description": "The type of browser action to perform.",
            },
            "selector": {
                "type": "STRING",
                "description": "The CSS selector for the target element (e.g., '#username', '.btn-login').",
            },
            "value": {
                "type": "STRING",
                "description": "The text value to type into an input field. Only for 'type' actions.",
            },
        },
        "required": ["step", "action", "selector"],
    },
}

_plan_adapter = TypeAdapter(List[PlanStep])


def parse_plan(raw: Any) -> List[PlanStep]:
    """
    Validate a decoded plan payload.

    Args:
        raw: JSON text or already-decoded list of step objects

    Returns:
        List[PlanStep]: Validated steps in order

    Raises:
        GenerationError: If the payload is not a valid plan
    """
    try:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        return _plan_adapter.validate_python(raw)
    except (ValueError, ValidationError) as e:
        logger.error(f"Invalid plan payload: {e}")
        raise GenerationError(GENERATION_ERROR_MESSAGE) from e


class PlanSource(ABC):
    """Converts a goal into an ordered plan or fails as a whole."""

    @abstractmethod
    async def generate_plan(self, goal: str) -> List[PlanStep]:
        """
        Generate a plan for a goal.

        Raises:
            GenerationError: If no valid plan can be produced
        """


class StaticPlanSource(PlanSource):
    """
    Plan source returning a fixed plan regardless of the goal.

    Useful for demos and tests; can be configured to always fail.
    """

    def __init__(self, steps: Sequence[Any] = (), error: Optional[str] = None):
        """
        Initialize static plan source.

        Args:
            steps: Plan steps (PlanStep instances or dicts)
            error: If set, every call fails with this message
        """
        self.steps = parse_plan(list(steps)) if steps else []
        self.error = error
        self.calls: List[str] = []

    async def generate_plan(self, goal: str) -> List[PlanStep]:
        self.calls.append(goal)
        if self.error is not None:
            raise GenerationError(self.error)
        return [step.model_copy() for step in self.steps]


class GeminiPlanSource(PlanSource):
    """Plan source backed by the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini plan source.

        Args:
            api_key: Gemini API key
            model: Model name
            base_url: API base URL
            timeout_seconds: Request timeout
            transport: Optional transport override (testing)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def build_request_body(self, goal: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": PLAN_PROMPT_TEMPLATE.format(goal=goal)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": PLAN_RESPONSE_SCHEMA,
            },
        }

    async def generate_plan(self, goal: str) -> List[PlanStep]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint,
                    headers={"x-goog-api-key": self.api_key},
                    json=self.build_request_body(goal),
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error generating automation plan: {e}", exc_info=True)
            raise GenerationError(GENERATION_ERROR_MESSAGE) from e
        except ValueError as e:
            logger.error(f"Plan response is not JSON: {e}")
            raise GenerationError(GENERATION_ERROR_MESSAGE) from e

        return parse_plan(self._extract_text(payload))

    def _extract_text(self, payload: Any) -> str:
        try:
            parts = payload["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts).strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"Unexpected plan response shape: {e}")
            raise GenerationError(GENERATION_ERROR_MESSAGE) from e


LOGIN_PLAN: List[Dict[str, Any]] = [
    {"step": "Type the username", "action": "type", "selector": "#username", "value": "admin"},
    {"step": "Type the password", "action": "type", "selector": "#password", "value": "password123"},
    {"step": "Click the login button", "action": "click", "selector": ".btn-login"},
]


def build_plan_source(settings: Settings) -> PlanSource:
    """
    Pick the plan source for the given settings.

    Uses Gemini when an API key is configured, otherwise the static login plan.
    """
    if settings.GEMINI_API_KEY:
        return GeminiPlanSource(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout_seconds=settings.PLAN_SOURCE_TIMEOUT,
        )

    logger.warning("GEMINI_API_KEY not set, using static login plan")
    return StaticPlanSource(LOGIN_PLAN)
