from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .client import APIClient, create_api_client
from .config import Settings, validate_invocation
from .constants import ACCOUNT_ENTITY_DATA_KEY
from .errors import IntegrationValidationError, ProviderAuthenticationError
from .jobstate import JobState
from .manifest import Manifest
from .steps import STEPS, Step, StepContext

log = logging.getLogger(__name__)


def select_steps(steps: Sequence[Step], step_ids: Optional[Iterable[str]] = None) -> List[Step]:
    """Return the requested steps plus everything they depend on."""
    by_id: Dict[str, Step] = {step.id: step for step in steps}
    if step_ids is None:
        return list(steps)

    wanted: Set[str] = set()
    pending = list(step_ids)
    while pending:
        step_id = pending.pop()
        if step_id in wanted:
            continue
        if step_id not in by_id:
            raise IntegrationValidationError(f"Unknown step {step_id}", details={"step": step_id})
        wanted.add(step_id)
        pending.extend(by_id[step_id].depends_on)
    return [step for step in steps if step.id in wanted]


def order_steps(steps: Sequence[Step]) -> List[Step]:
    """Order steps so that each runs after its dependencies, keeping declaration order otherwise."""
    by_id: Dict[str, Step] = {step.id: step for step in steps}
    ordered: List[Step] = []
    state: Dict[str, str] = {}

    def visit(step: Step, path: Tuple[str, ...]) -> None:
        if state.get(step.id) == "done":
            return
        if state.get(step.id) == "visiting":
            cycle = " -> ".join(path + (step.id,))
            raise IntegrationValidationError(f"Step dependency cycle: {cycle}", details={"cycle": cycle})
        state[step.id] = "visiting"
        for dep_id in step.depends_on:
            dep = by_id.get(dep_id)
            if dep is None:
                raise IntegrationValidationError(
                    f"Step {step.id} depends on unknown step {dep_id}",
                    details={"step": step.id, "dependency": dep_id},
                )
            visit(dep, path + (step.id,))
        state[step.id] = "done"
        ordered.append(step)

    for step in steps:
        visit(step, ())
    return ordered


def collect(
    settings: Settings,
    api_client: Optional[APIClient] = None,
    job_state: Optional[JobState] = None,
    step_ids: Optional[Iterable[str]] = None,
    steps: Sequence[Step] = STEPS,
) -> Tuple[Manifest, JobState]:
    """Run the sync steps against one Okta org and record each outcome in a manifest.

    A failed step is recorded and its dependants are skipped; independent
    steps still run. Invalid configuration or unusable credentials abort
    the run before any step starts.
    """
    validate_invocation(settings)
    plan = order_steps(select_steps(steps, step_ids))
    api_client = api_client or create_api_client(settings)
    job_state = job_state or JobState()
    manifest = Manifest.new(org_url=settings.okta_org_url)

    api_client.verify_authentication()

    context = StepContext(settings=settings, job_state=job_state, api_client=api_client)
    failed: Set[str] = set()
    for step in plan:
        blocked = [dep for dep in step.depends_on if dep in failed]
        if blocked:
            log.warning("Skipping step %s, dependency failed: %s", step.id, ", ".join(blocked))
            manifest.add_step(step.id, status="skipped", detail="dependency-failed")
            failed.add(step.id)
            continue

        before = job_state.summary()
        log.info("Running step %s", step.id)
        try:
            step.handler(context)
        except ProviderAuthenticationError:
            raise
        except Exception as exc:
            log.exception("Step %s failed", step.id)
            failed.add(step.id)
            manifest.add_step(step.id, status="error", detail=type(exc).__name__, errors=[str(exc)])
            continue

        after = job_state.summary()
        manifest.add_step(
            step.id,
            status="ok",
            entities=after["entities"] - before["entities"],
            relationships=(
                after["relationships"]
                + after["mapped_relationships"]
                - before["relationships"]
                - before["mapped_relationships"]
            ),
        )

    account = job_state.get_data(ACCOUNT_ENTITY_DATA_KEY)
    if account is not None:
        manifest.account_key = account.key
    manifest.finish()
    log.info("Collection finished: %s", job_state.summary())
    return manifest, job_state
