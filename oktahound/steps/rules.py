from __future__ import annotations

from typing import Any, Dict

from ..graph import create_direct_relationship
from ..normalize import create_rule_entity
from .base import Step, StepContext, get_account_entity


def fetch_rules(context: StepContext) -> None:
    """Fetch group rules. Orgs without the rules feature yield none."""
    job_state = context.job_state
    account = get_account_entity(job_state)

    def visit_rule(rule: Dict[str, Any]) -> None:
        rule_entity = job_state.add_entity(create_rule_entity(context.settings, rule))
        job_state.add_relationship(create_direct_relationship("HAS", account, rule_entity))
        for group_id in rule_entity.properties["group_ids"]:
            group = job_state.find_entity(group_id)
            if group is None:
                context.logger.debug("Rule %s targets unknown group %s", rule_entity.key, group_id)
                continue
            job_state.add_relationship(create_direct_relationship("MANAGES", rule_entity, group))

    context.api_client.iterate_rules(visit_rule)


rule_steps = [
    Step(id="fetch-rules", name="Fetch Rules", handler=fetch_rules, depends_on=["fetch-groups"]),
]
