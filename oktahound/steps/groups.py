from __future__ import annotations

from typing import Any, Dict

from ..errors import IntegrationMissingKeyError
from ..graph import create_direct_relationship
from ..normalize import create_group_entity
from .base import Step, StepContext, get_account_entity


def fetch_groups(context: StepContext) -> None:
    job_state = context.job_state
    api_client = context.api_client
    account = get_account_entity(job_state)

    def visit_group(group: Dict[str, Any]) -> None:
        group_entity = job_state.add_entity(create_group_entity(context.settings, group))
        job_state.add_relationship(create_direct_relationship("HAS", account, group_entity))

        def visit_member(user: Dict[str, Any]) -> None:
            user_entity = job_state.find_entity(user["id"])
            if user_entity is None:
                raise IntegrationMissingKeyError(f"Expected user with key to exist (key={user['id']})")
            job_state.add_relationship(create_direct_relationship("HAS", group_entity, user_entity))

        api_client.iterate_users_for_group(group, visit_member)

    api_client.iterate_groups(visit_group)


group_steps = [
    Step(id="fetch-groups", name="Fetch Groups", handler=fetch_groups, depends_on=["fetch-users"]),
]
