"""Resource iteration over the Okta API.

``APIClient`` exposes one entry point per resource type. Each takes an
iteratee called once per record and returns when every page has been
visited. Failures are classified by the resource's
:class:`~oktahound.policy.ErrorPolicy` right around the upstream call.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from .config import Settings
from .constants import (
    APP_CREATED_LOG_FILTER,
    DEPROVISIONED_USERS_FILTER,
    LOG_LOOKBACK_DAYS,
)
from .errors import OktaApiError, ProviderAuthenticationError, ProviderAuthorizationError
from .okta import OktaClient, OktaCollection
from .policy import POLICIES, Outcome
from .util import format_time

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
ResourceIteratee = Callable[[Record], Any]


class APIClient:
    """Iterates Okta resources under a per-resource error policy.

    Example:
        >>> client = create_api_client(settings)
        >>> client.verify_authentication()
        >>> client.iterate_groups(lambda group: print(group["profile"]["name"]))
    """

    def __init__(self, settings: Settings, okta_client: Optional[OktaClient] = None):
        self.settings = settings
        self.okta = okta_client or OktaClient(settings)

    def _iterate(
        self,
        resource: str,
        collection: Callable[[], OktaCollection],
        iteratee: ResourceIteratee,
        endpoint: Optional[str] = None,
    ) -> None:
        records = iter(collection())
        while True:
            try:
                record = next(records)
            except StopIteration:
                return
            except Exception as err:
                # only fetch failures are classified; iteratee errors propagate as-is
                self._handle(resource, err, endpoint)
                return
            if iteratee(record) is False:
                return

    def _handle(self, resource: str, err: BaseException, endpoint: Optional[str] = None) -> None:
        outcome = POLICIES[resource].classify(err)
        status = getattr(err, "status", None)
        url = endpoint or getattr(err, "url", None)
        summary = getattr(err, "error_summary", None)
        if outcome is Outcome.FATAL_AUTHENTICATION:
            raise ProviderAuthenticationError(
                endpoint=url, status=status, status_text=summary or str(err)
            ) from err
        if outcome is Outcome.FATAL_AUTHORIZATION:
            raise ProviderAuthorizationError(endpoint=url, status=status, status_text=summary) from err
        if outcome.ignorable:
            logger.info("Skipping %s (%s): %s %s", resource, outcome.value, status, url)
            return
        raise err

    def verify_authentication(self) -> None:
        """Fetch a single user to prove the credentials work."""
        self._iterate(
            "verify-credentials",
            lambda: self.okta.list_users({"limit": 1}),
            lambda user: False,
            endpoint=f"{self.okta.base_url}/api/v1/users?limit=1",
        )

    def iterate_users(self, iteratee: ResourceIteratee) -> None:
        """Iterate every user, then every deprovisioned user.

        Deprovisioned users are left out of the default listing.
        """
        self._iterate("users", self.okta.list_users, iteratee)
        self._iterate(
            "users",
            lambda: self.okta.list_users({"filter": DEPROVISIONED_USERS_FILTER}),
            iteratee,
        )

    def iterate_groups(self, iteratee: ResourceIteratee) -> None:
        self._iterate("groups", self.okta.list_groups, iteratee)

    def iterate_users_for_group(self, group: Record, iteratee: ResourceIteratee) -> None:
        self._iterate("group-users", lambda: self.okta.list_group_users(group["id"]), iteratee)

    def iterate_devices_for_user(self, user_id: str, iteratee: ResourceIteratee) -> None:
        """Iterate the MFA factors enrolled by a user."""
        self._iterate("user-factors", lambda: self.okta.list_factors(user_id), iteratee)

    def iterate_applications(self, iteratee: ResourceIteratee) -> None:
        self._iterate("applications", self.okta.list_applications, iteratee)

    def iterate_groups_for_app(self, app: Record, iteratee: ResourceIteratee) -> None:
        self._iterate(
            "application-groups",
            lambda: self.okta.list_application_group_assignments(app["id"]),
            iteratee,
        )

    def iterate_users_for_app(self, app: Record, iteratee: ResourceIteratee) -> None:
        self._iterate("application-users", lambda: self.okta.list_application_users(app["id"]), iteratee)

    def iterate_rules(self, iteratee: ResourceIteratee) -> None:
        self._iterate("group-rules", self.okta.list_group_rules, iteratee)

    def get_support_info(self) -> Record:
        try:
            return self.okta.get_org_okta_support_settings()
        except OktaApiError as err:
            self._handle("support-settings", err)
            raise

    def iterate_roles_by_user(self, user_id: str, iteratee: ResourceIteratee) -> None:
        self._iterate("user-roles", lambda: self.okta.list_assigned_roles_for_user(user_id), iteratee)

    def iterate_roles_by_group(self, group_id: str, iteratee: ResourceIteratee) -> None:
        self._iterate("group-roles", lambda: self.okta.list_group_assigned_roles(group_id), iteratee)

    def iterate_app_created_logs(
        self,
        iteratee: ResourceIteratee,
        now: Optional[datetime] = None,
    ) -> None:
        """Iterate system log events for newly created applications.

        ``since`` is pinned to the full retention window; without it the
        API only returns the last 7 days.
        """
        now = now or datetime.now(timezone.utc)
        since = format_time(now - timedelta(days=LOG_LOOKBACK_DAYS))
        params = {"filter": APP_CREATED_LOG_FILTER, "since": since}
        self._iterate("app-created-logs", lambda: self.okta.get_logs(params), iteratee)


def create_api_client(settings: Settings) -> APIClient:
    return APIClient(settings)
