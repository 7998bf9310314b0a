from __future__ import annotations

from typing import Any, Dict

from ..constants import APPLICATION_ENTITY_TYPE, USER_ENTITY_TYPE
from ..graph import create_direct_relationship
from ..util import parse_time, to_array
from .base import Step, StepContext


def fetch_app_created_logs(context: StepContext) -> None:
    """Link users to the applications they created within the log retention window."""
    job_state = context.job_state

    def visit_event(event: Dict[str, Any]) -> None:
        actor = job_state.find_entity((event.get("actor") or {}).get("id") or "")
        if actor is None or actor.type != USER_ENTITY_TYPE:
            return
        for target in to_array(event.get("target")):
            if not isinstance(target, dict) or target.get("type") != "AppInstance":
                continue
            app = job_state.find_entity(target.get("id") or "")
            if app is None or app.type != APPLICATION_ENTITY_TYPE:
                continue
            relationship = create_direct_relationship(
                "CREATED",
                actor,
                app,
                properties={"created_on": parse_time(event.get("published"))},
            )
            if not job_state.has_key(relationship.key):
                job_state.add_relationship(relationship)

    context.api_client.iterate_app_created_logs(visit_event)


log_steps = [
    Step(
        id="fetch-app-created-logs",
        name="Fetch Application Creation Events",
        handler=fetch_app_created_logs,
        depends_on=["fetch-applications"],
    ),
]
