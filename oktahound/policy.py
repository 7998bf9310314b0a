"""Per-resource error classification.

Each upstream collection gets an :class:`ErrorPolicy`. Dependent
collections (members of a group, factors of a user, assignments of an
app) ignore 404 because the parent may be deleted while the sync runs.
The group rules listing answers 400 when rules are not enabled for the
org; that case is told apart from real failures by the request URL.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Pattern

from .errors import OktaApiError


class Outcome(str, Enum):
    FATAL_AUTHENTICATION = "fatal-authentication"
    FATAL_AUTHORIZATION = "fatal-authorization"
    IGNORE_NOT_FOUND = "ignorable-not-found"
    IGNORE_FEATURE_DISABLED = "ignorable-feature-disabled"
    RETHROW = "rethrow"

    @property
    def ignorable(self) -> bool:
        return self in (Outcome.IGNORE_NOT_FOUND, Outcome.IGNORE_FEATURE_DISABLED)


@dataclass(frozen=True)
class ErrorPolicy:
    """Classification rule for one resource type.

    Attributes:
        resource: Resource type name used in logs
        ignore_not_found: Treat 404 as an expected race with a deletion
        feature_disabled_url: URL pattern whose ``feature_disabled_status``
            responses mean an optional feature is switched off
        feature_disabled_status: Status paired with ``feature_disabled_url``
        authentication_probe: Every failure is an authentication failure
    """

    resource: str
    ignore_not_found: bool = False
    feature_disabled_url: Optional[Pattern[str]] = None
    feature_disabled_status: int = 400
    authentication_probe: bool = False

    def classify(self, err: BaseException) -> Outcome:
        if self.authentication_probe:
            return Outcome.FATAL_AUTHENTICATION
        if not isinstance(err, OktaApiError):
            return Outcome.RETHROW
        if (
            self.feature_disabled_url is not None
            and err.status == self.feature_disabled_status
            and self.feature_disabled_url.search(err.url or "")
        ):
            return Outcome.IGNORE_FEATURE_DISABLED
        if err.status == 403:
            return Outcome.FATAL_AUTHORIZATION
        if err.status == 404 and self.ignore_not_found:
            return Outcome.IGNORE_NOT_FOUND
        return Outcome.RETHROW


GROUP_RULES_URL_PATTERN = re.compile(r"/api/v1/groups/rules")

POLICIES: Dict[str, ErrorPolicy] = {
    policy.resource: policy
    for policy in (
        ErrorPolicy("verify-credentials", authentication_probe=True),
        ErrorPolicy("users"),
        ErrorPolicy("groups"),
        ErrorPolicy("group-users", ignore_not_found=True),
        ErrorPolicy("user-factors", ignore_not_found=True),
        ErrorPolicy("applications"),
        ErrorPolicy("application-groups", ignore_not_found=True),
        ErrorPolicy("application-users", ignore_not_found=True),
        ErrorPolicy("group-rules", feature_disabled_url=GROUP_RULES_URL_PATTERN),
        ErrorPolicy("user-roles"),
        ErrorPolicy("group-roles"),
        ErrorPolicy("app-created-logs"),
        ErrorPolicy("support-settings"),
    )
}


def classify(resource: str, err: BaseException) -> Outcome:
    """Classify ``err`` raised while fetching ``resource``."""
    return POLICIES[resource].classify(err)
