"""Effect registry mapping (action, selector) pairs to target-state effects."""
from typing import Callable, Dict, List, Optional, Tuple
from conductor.core.enums import StepAction
from conductor.models.worker import TargetState
from conductor.worker.models import EffectResult

EffectHandler = Callable[[TargetState, Optional[str]], EffectResult]
EffectKey = Tuple[StepAction, str]


class EffectRegistry:
    """
    Registry for mapping (action, selector) pairs to effect handlers.

    A handler receives the worker's target state and the task value and
    mutates the state in place.
    """

    def __init__(self):
        """Initialize empty effect registry."""
        self._handlers: Dict[EffectKey, EffectHandler] = {}

    def register_handler(self, action: StepAction, selector: str, handler: EffectHandler) -> None:
        """
        Register an effect handler for an action on a selector.

        Args:
            action: Step action the handler applies to
            selector: CSS selector bound to the handler
            handler: Effect function

        Raises:
            ValueError: If a handler for this pair is already registered
        """
        key = (StepAction(action), selector)
        if key in self._handlers:
            raise ValueError(f"Effect for {key[0]} on '{selector}' already registered")

        self._handlers[key] = handler

    def register(self, action: StepAction, selector: str) -> Callable:
        """
        Decorator for registering an effect handler.

        Example:
            >>> registry = EffectRegistry()
            >>> @registry.register(StepAction.TYPE, "#email")
            >>> def type_email(state, value):
            >>>     state.field_a = value or ""
            >>>     return EffectResult(applied=True)
        """

        def decorator(handler: EffectHandler) -> EffectHandler:
            self.register_handler(action, selector, handler)
            return handler

        return decorator

    def get_handler(self, action: StepAction, selector: str) -> EffectHandler:
        """
        Get the effect handler for an action on a selector.

        Raises:
            KeyError: If no handler is registered for this pair
        """
        key = (StepAction(action), selector)
        if key not in self._handlers:
            raise KeyError(f"No effect registered for {key[0]} on '{selector}'")

        return self._handlers[key]

    def has_handler(self, action: StepAction, selector: str) -> bool:
        return (StepAction(action), selector) in self._handlers

    def list_handlers(self) -> List[EffectKey]:
        return list(self._handlers.keys())


def build_default_registry() -> EffectRegistry:
    """Registry bound to the login sandbox selectors."""
    from conductor.worker.handlers.login_handlers import (
        click_login,
        type_password,
        type_username,
    )

    registry = EffectRegistry()
    registry.register_handler(StepAction.TYPE, "#username", type_username)
    registry.register_handler(StepAction.TYPE, "#password", type_password)
    registry.register_handler(StepAction.CLICK, ".btn-login", click_login)
    return registry
