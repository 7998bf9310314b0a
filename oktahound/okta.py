"""Okta REST API transport.

Provides an authenticated ``requests`` session and lazy, page-following
collections for each listing endpoint used by the sync.

Usage:
    okta = OktaClient(settings)
    okta.list_groups().each(lambda group: print(group["id"]))
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Settings
from .errors import OktaApiError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Iteratee = Callable[[Record], Any]


class OktaRetry(Retry):
    """Retry policy that also honours Okta's ``X-Rate-Limit-Reset`` header."""

    def get_retry_after(self, response):
        retry_after = super().get_retry_after(response)
        if retry_after is not None:
            return retry_after
        reset = response.headers.get("X-Rate-Limit-Reset")
        if reset and reset.isdigit():
            return max(0.0, int(reset) - time.time())
        return None


def _error_from_response(response: requests.Response) -> OktaApiError:
    body: Dict[str, Any] = {}
    try:
        parsed = response.json()
        if isinstance(parsed, dict):
            body = parsed
    except ValueError:
        pass
    return OktaApiError(
        status=response.status_code,
        url=response.url,
        error_summary=body.get("errorSummary") or response.reason,
        error_code=body.get("errorCode"),
        error_id=body.get("errorId"),
    )


class OktaCollection:
    """Lazy, forward-only sequence of records from a paginated endpoint.

    The next page is requested only after every record of the current page
    has been handed out. A collection can be consumed once.
    """

    def __init__(self, client: "OktaClient", path: str, params: Optional[Dict[str, Any]] = None):
        self.client = client
        self.path = path
        self.params = dict(params or {})
        self._consumed = False

    def __iter__(self) -> Iterator[Record]:
        if self._consumed:
            raise RuntimeError(f"Collection for {self.path} has already been consumed")
        self._consumed = True
        return self._records()

    def _records(self) -> Iterator[Record]:
        url: Optional[str] = self.client.url(self.path)
        params: Optional[Dict[str, Any]] = self.params
        while url:
            response = self.client.get(url, params=params)
            page = response.json()
            if not page:
                return
            yield from page
            url = response.links.get("next", {}).get("url")
            # the next link already carries the query string
            params = None

    def each(self, iteratee: Iteratee) -> None:
        """Apply ``iteratee`` to every record, returning when the sequence is drained.

        An iteratee returning ``False`` stops iteration before further
        pages are requested.
        """
        for record in self:
            if iteratee(record) is False:
                break


class OktaClient:
    """Authenticated HTTP client for one Okta organization."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.base_url = settings.okta_org_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"SSWS {settings.okta_api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        retry = OktaRetry(
            total=settings.max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        logger.debug("GET %s params=%s", url, params)
        response = self.session.get(url, params=params, timeout=self.settings.request_timeout)
        if response.status_code >= 400:
            raise _error_from_response(response)
        return response

    def collection(self, path: str, params: Optional[Dict[str, Any]] = None) -> OktaCollection:
        query = {"limit": self.settings.page_limit}
        query.update({k: v for k, v in (params or {}).items() if v is not None})
        return OktaCollection(self, path, query)

    # Listings

    def list_users(self, params: Optional[Dict[str, Any]] = None) -> OktaCollection:
        return self.collection("/api/v1/users", params)

    def list_groups(self, params: Optional[Dict[str, Any]] = None) -> OktaCollection:
        return self.collection("/api/v1/groups", params)

    def list_group_users(self, group_id: str) -> OktaCollection:
        return self.collection(f"/api/v1/groups/{group_id}/users")

    def list_factors(self, user_id: str) -> OktaCollection:
        # factors are not paginated and reject the limit parameter
        return OktaCollection(self, f"/api/v1/users/{user_id}/factors")

    def list_applications(self, params: Optional[Dict[str, Any]] = None) -> OktaCollection:
        return self.collection("/api/v1/apps", params)

    def list_application_group_assignments(self, app_id: str) -> OktaCollection:
        return self.collection(f"/api/v1/apps/{app_id}/groups")

    def list_application_users(self, app_id: str) -> OktaCollection:
        return self.collection(f"/api/v1/apps/{app_id}/users")

    def list_group_rules(self) -> OktaCollection:
        return self.collection("/api/v1/groups/rules")

    def list_assigned_roles_for_user(self, user_id: str) -> OktaCollection:
        return OktaCollection(self, f"/api/v1/users/{user_id}/roles")

    def list_group_assigned_roles(self, group_id: str) -> OktaCollection:
        return OktaCollection(self, f"/api/v1/groups/{group_id}/roles")

    def get_logs(self, params: Optional[Dict[str, Any]] = None) -> OktaCollection:
        return self.collection("/api/v1/logs", params)

    # Single objects

    def get_org_okta_support_settings(self) -> Dict[str, Any]:
        return self.get(self.url("/api/v1/org/privacy/oktaSupport")).json()
