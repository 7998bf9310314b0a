from __future__ import annotations

from typing import Any, Dict, Optional

from ..assignments import collect_aws_role_assignments
from ..constants import GROUP_AWS_IAM_ROLE_RELATIONSHIP_TYPE, USER_AWS_IAM_ROLE_RELATIONSHIP_TYPE
from ..graph import Entity, create_direct_relationship
from ..normalize import create_application_entity
from ..util import to_array
from .base import Step, StepContext, get_account_entity


def _assign(
    context: StepContext,
    assignee: Optional[Entity],
    assignee_id: str,
    app_entity: Entity,
    assignment: Dict[str, Any],
    relationship_type: str,
) -> None:
    job_state = context.job_state
    if assignee is None:
        context.logger.warning(
            "Application %s assigned to unknown principal %s, skipping", app_entity.key, assignee_id
        )
        return

    profile = assignment.get("profile") or {}
    relationship = create_direct_relationship(
        "ASSIGNED",
        assignee,
        app_entity,
        properties={
            "role": profile.get("role") if isinstance(profile.get("role"), str) else None,
            "saml_roles": [r for r in to_array(profile.get("samlRoles")) if isinstance(r, str)],
        },
    )
    if not job_state.has_key(relationship.key):
        job_state.add_relationship(relationship)

    aws_account_id = app_entity.properties.get("aws_account_id")
    if not aws_account_id:
        return
    for mapped in collect_aws_role_assignments(assignee.key, profile, relationship_type, aws_account_id):
        if not job_state.has_key(mapped.key):
            job_state.add_relationship(mapped)


def fetch_applications(context: StepContext) -> None:
    """Fetch applications with their group and user assignments.

    Assignments to AWS applications also yield mapped relationships to the
    AWS IAM roles named in the assignment profile.
    """
    job_state = context.job_state
    api_client = context.api_client
    account = get_account_entity(job_state)

    def visit_app(app: Dict[str, Any]) -> None:
        app_entity = job_state.add_entity(create_application_entity(context.settings, app))
        job_state.add_relationship(create_direct_relationship("HAS", account, app_entity))

        api_client.iterate_groups_for_app(
            app,
            lambda group: _assign(
                context,
                job_state.find_entity(group["id"]),
                group["id"],
                app_entity,
                group,
                GROUP_AWS_IAM_ROLE_RELATIONSHIP_TYPE,
            ),
        )
        api_client.iterate_users_for_app(
            app,
            lambda user: _assign(
                context,
                job_state.find_entity(user["id"]),
                user["id"],
                app_entity,
                user,
                USER_AWS_IAM_ROLE_RELATIONSHIP_TYPE,
            ),
        )

    api_client.iterate_applications(visit_app)


application_steps = [
    Step(
        id="fetch-applications",
        name="Fetch Applications",
        handler=fetch_applications,
        depends_on=["fetch-groups"],
    ),
]
