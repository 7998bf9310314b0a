"""Shared types for sync steps."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List

from ..client import APIClient
from ..config import Settings
from ..constants import ACCOUNT_ENTITY_DATA_KEY
from ..errors import IntegrationMissingKeyError
from ..graph import Entity
from ..jobstate import JobState


@dataclass
class StepContext:
    settings: Settings
    job_state: JobState
    api_client: APIClient
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("oktahound.steps"))


@dataclass(frozen=True)
class Step:
    """A unit of the sync that runs after every step it depends on."""

    id: str
    name: str
    handler: Callable[[StepContext], None]
    depends_on: List[str] = field(default_factory=list)


def get_account_entity(job_state: JobState) -> Entity:
    account = job_state.get_data(ACCOUNT_ENTITY_DATA_KEY)
    if account is None:
        raise IntegrationMissingKeyError("Account entity not found in job state")
    return account
