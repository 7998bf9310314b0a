from __future__ import annotations

from ..constants import ACCOUNT_ENTITY_DATA_KEY
from ..errors import ProviderAuthorizationError
from ..normalize import create_account_entity
from .base import Step, StepContext


def fetch_account(context: StepContext) -> None:
    try:
        support = context.api_client.get_support_info()
    except ProviderAuthorizationError as err:
        # support settings require a super admin token
        context.logger.warning("Okta support settings unavailable: %s", err.message)
        support = None
    account = context.job_state.add_entity(create_account_entity(context.settings, support))
    context.job_state.set_data(ACCOUNT_ENTITY_DATA_KEY, account)


account_steps = [
    Step(id="fetch-account", name="Fetch Account", handler=fetch_account),
]
