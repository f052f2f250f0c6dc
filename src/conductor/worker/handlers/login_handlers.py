"""Effect handlers for the simulated login form."""
from typing import Optional
from conductor.models.worker import TargetState
from conductor.worker.models import EffectResult


def type_username(state: TargetState, value: Optional[str]) -> EffectResult:
    """Write the typed value into the username field."""
    state.field_a = value or ""
    return EffectResult(applied=True)


def type_password(state: TargetState, value: Optional[str]) -> EffectResult:
    """Write the typed value into the password field."""
    state.field_b = value or ""
    return EffectResult(applied=True)


def click_login(state: TargetState, value: Optional[str]) -> EffectResult:
    """
    Press the login button.

    The flag is a transient visual pulse; the simulator clears it after
    a short delay.
    """
    state.action_flag = True
    return EffectResult(applied=True, pulse=True)
