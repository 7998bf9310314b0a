from __future__ import annotations

from typing import Any, Dict

from ..constants import APP_USER_GROUP_ENTITY_TYPE, USER_ENTITY_TYPE, USER_GROUP_ENTITY_TYPE
from ..graph import Entity, create_direct_relationship
from ..normalize import create_role_entity
from .base import Step, StepContext


def _add_role(context: StepContext, assignee: Entity, role: Dict[str, Any]) -> None:
    job_state = context.job_state
    # group-inherited assignments show up under both the group and its members
    role_entity = job_state.find_entity(role["id"]) or job_state.add_entity(create_role_entity(role))
    relationship = create_direct_relationship("ASSIGNED", assignee, role_entity)
    if not job_state.has_key(relationship.key):
        job_state.add_relationship(relationship)


def fetch_roles(context: StepContext) -> None:
    """Fetch administrator roles assigned to users and groups."""
    job_state = context.job_state
    api_client = context.api_client

    for user in job_state.iterate_entities(USER_ENTITY_TYPE):
        if user.properties.get("deprovisioned"):
            continue
        api_client.iterate_roles_by_user(user.key, lambda role, user=user: _add_role(context, user, role))

    for group_type in (USER_GROUP_ENTITY_TYPE, APP_USER_GROUP_ENTITY_TYPE):
        for group in job_state.iterate_entities(group_type):
            api_client.iterate_roles_by_group(
                group.key, lambda role, group=group: _add_role(context, group, role)
            )


role_steps = [
    Step(id="fetch-roles", name="Fetch Roles", handler=fetch_roles, depends_on=["fetch-groups"]),
]
