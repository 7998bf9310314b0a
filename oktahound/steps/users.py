from __future__ import annotations

from typing import Any, Dict

from ..graph import create_direct_relationship
from ..normalize import create_mfa_device_entity, create_user_entity
from .base import Step, StepContext, get_account_entity


def fetch_users(context: StepContext) -> None:
    """Fetch users, deprovisioned ones included, and their MFA devices."""
    job_state = context.job_state
    api_client = context.api_client
    account = get_account_entity(job_state)

    def visit_user(user: Dict[str, Any]) -> None:
        if job_state.has_key(user["id"]):
            context.logger.debug("User %s already visited", user["id"])
            return
        user_entity = job_state.add_entity(create_user_entity(context.settings, user))
        job_state.add_relationship(create_direct_relationship("HAS", account, user_entity))

        def visit_factor(factor: Dict[str, Any]) -> None:
            device = job_state.find_entity(factor["id"])
            if device is None:
                device = job_state.add_entity(create_mfa_device_entity(factor))
            relationship = create_direct_relationship("ASSIGNED", user_entity, device)
            if not job_state.has_key(relationship.key):
                job_state.add_relationship(relationship)

        api_client.iterate_devices_for_user(user["id"], visit_factor)

    api_client.iterate_users(visit_user)


user_steps = [
    Step(id="fetch-users", name="Fetch Users", handler=fetch_users, depends_on=["fetch-account"]),
]
