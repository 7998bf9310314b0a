"""Sync steps, in declaration order."""

from .account import account_steps
from .applications import application_steps
from .base import Step, StepContext, get_account_entity
from .groups import group_steps
from .logs import log_steps
from .roles import role_steps
from .rules import rule_steps
from .users import user_steps

STEPS = [
    *account_steps,
    *user_steps,
    *group_steps,
    *application_steps,
    *rule_steps,
    *role_steps,
    *log_steps,
]

__all__ = ["STEPS", "Step", "StepContext", "get_account_entity"]
