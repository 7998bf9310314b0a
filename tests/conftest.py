"""Pytest configuration and shared fixtures for OktaHound tests.

This module provides common fixtures used across multiple test modules,
including settings, an in-memory fake of the resource iterator loaded
with a small Okta org, and mock Neo4j drivers.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from oktahound.config import Settings
from oktahound.jobstate import JobState
from oktahound.steps import StepContext


# ============================================================================
# Custom Pytest Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external services (Neo4j, Okta)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests that take a long time to run"
    )


# ============================================================================
# Settings Fixtures
# ============================================================================

ORG_URL = "https://acme.okta.com"


@pytest.fixture
def clean_environment():
    """Fixture that cleans OktaHound environment variables.

    Removes OKTAHOUND_* env vars before test and restores after.
    """
    saved = {k: v for k, v in os.environ.items() if k.startswith("OKTAHOUND_")}
    for key in saved:
        del os.environ[key]

    yield

    for key in [k for k in os.environ if k.startswith("OKTAHOUND_")]:
        del os.environ[key]
    os.environ.update(saved)


@pytest.fixture
def settings() -> Settings:
    """Settings for the acme org with retries disabled."""
    return Settings(
        _env_file=None,
        okta_org_url=ORG_URL,
        okta_api_key="00token",
        max_retries=0,
    )


# ============================================================================
# Resource Iterator Fake
# ============================================================================

Iteratee = Callable[[Dict[str, Any]], Any]


def _each(records: List[Dict[str, Any]], iteratee: Iteratee) -> None:
    for record in records:
        if iteratee(record) is False:
            break


class FakeAPIClient:
    """In-memory stand-in for :class:`oktahound.client.APIClient`."""

    def __init__(self, **data: Any) -> None:
        self.users: List[dict] = data.get("users", [])
        self.groups: List[dict] = data.get("groups", [])
        self.group_members: Dict[str, List[dict]] = data.get("group_members", {})
        self.factors: Dict[str, List[dict]] = data.get("factors", {})
        self.apps: List[dict] = data.get("apps", [])
        self.app_groups: Dict[str, List[dict]] = data.get("app_groups", {})
        self.app_users: Dict[str, List[dict]] = data.get("app_users", {})
        self.rules: List[dict] = data.get("rules", [])
        self.user_roles: Dict[str, List[dict]] = data.get("user_roles", {})
        self.group_roles: Dict[str, List[dict]] = data.get("group_roles", {})
        self.logs: List[dict] = data.get("logs", [])
        self.support: Optional[dict] = data.get("support")
        self.support_error: Optional[Exception] = data.get("support_error")
        self.verified = False
        self.role_lookups: List[str] = []

    def verify_authentication(self) -> None:
        self.verified = True

    def iterate_users(self, iteratee: Iteratee) -> None:
        _each(self.users, iteratee)

    def iterate_groups(self, iteratee: Iteratee) -> None:
        _each(self.groups, iteratee)

    def iterate_users_for_group(self, group: dict, iteratee: Iteratee) -> None:
        _each(self.group_members.get(group["id"], []), iteratee)

    def iterate_devices_for_user(self, user_id: str, iteratee: Iteratee) -> None:
        _each(self.factors.get(user_id, []), iteratee)

    def iterate_applications(self, iteratee: Iteratee) -> None:
        _each(self.apps, iteratee)

    def iterate_groups_for_app(self, app: dict, iteratee: Iteratee) -> None:
        _each(self.app_groups.get(app["id"], []), iteratee)

    def iterate_users_for_app(self, app: dict, iteratee: Iteratee) -> None:
        _each(self.app_users.get(app["id"], []), iteratee)

    def iterate_rules(self, iteratee: Iteratee) -> None:
        _each(self.rules, iteratee)

    def get_support_info(self) -> dict:
        if self.support_error is not None:
            raise self.support_error
        return self.support or {}

    def iterate_roles_by_user(self, user_id: str, iteratee: Iteratee) -> None:
        self.role_lookups.append(user_id)
        _each(self.user_roles.get(user_id, []), iteratee)

    def iterate_roles_by_group(self, group_id: str, iteratee: Iteratee) -> None:
        self.role_lookups.append(group_id)
        _each(self.group_roles.get(group_id, []), iteratee)

    def iterate_app_created_logs(self, iteratee: Iteratee, now=None) -> None:
        _each(self.logs, iteratee)


def sample_org() -> Dict[str, Any]:
    """A small org touching every resource type.

    Returns:
        Keyword arguments for :class:`FakeAPIClient`
    """
    return {
        "support": {"support": "ENABLED", "expiration": "2026-01-01T00:00:00.000Z"},
        "users": [
            {
                "id": "00u1",
                "status": "ACTIVE",
                "created": "2024-01-01T00:00:00.000Z",
                "profile": {"login": "alice@acme.com", "firstName": "Alice", "lastName": "Smith"},
            },
            {
                "id": "00u2",
                "status": "DEPROVISIONED",
                "profile": {"login": "bob@acme.com"},
            },
        ],
        "factors": {
            "00u1": [{"id": "mfa1", "factorType": "push", "provider": "OKTA", "status": "ACTIVE"}],
        },
        "groups": [
            {"id": "00g1", "type": "OKTA_GROUP", "profile": {"name": "Engineering"}},
            {"id": "00g2", "type": "APP_GROUP", "profile": {"name": "AD Users"}},
        ],
        "group_members": {"00g1": [{"id": "00u1"}]},
        "apps": [
            {
                "id": "0oa1",
                "name": "amazon_aws",
                "label": "AWS Prod",
                "status": "ACTIVE",
                "signOnMode": "SAML_2_0",
                "settings": {
                    "app": {
                        "awsEnvironmentType": "aws.amazon",
                        "identityProviderArn": "arn:aws:iam::123456789012:saml-provider/Okta",
                    }
                },
                "_links": {
                    "logo": [{"name": "medium", "href": "https://logo.example/aws.png"}],
                    "appLinks": [{"name": "login", "href": "https://acme.okta.com/home/aws"}],
                },
            }
        ],
        "app_groups": {
            "0oa1": [{"id": "00g1", "profile": {"role": "Admin", "samlRoles": ["ReadOnly", "[Prod] -- Admin"]}}],
        },
        "app_users": {
            "0oa1": [{"id": "00u1", "profile": {"role": "Admin"}}, {"id": "00u404", "profile": {}}],
        },
        "rules": [
            {
                "id": "0pr1",
                "name": "Engineers",
                "status": "ACTIVE",
                "actions": {"assignUserToGroups": {"groupIds": ["00g1", "00gGone"]}},
            }
        ],
        "user_roles": {
            "00u1": [{"id": "ra1", "type": "SUPER_ADMIN", "label": "Super Administrator"}],
            "00u2": [{"id": "ra9", "type": "ORG_ADMIN"}],
        },
        "group_roles": {"00g1": [{"id": "ra2", "type": "APP_ADMIN", "label": "Application Administrator"}]},
        "logs": [
            {
                "published": "2026-01-01T00:00:00.000Z",
                "actor": {"id": "00u1", "type": "User"},
                "target": [{"id": "0oa1", "type": "AppInstance"}],
            }
        ],
    }


@pytest.fixture
def fake_api_client() -> FakeAPIClient:
    return FakeAPIClient(**sample_org())


@pytest.fixture
def step_context(settings: Settings, fake_api_client: FakeAPIClient) -> StepContext:
    """Step context over an empty job state and the sample org."""
    return StepContext(settings=settings, job_state=JobState(), api_client=fake_api_client)


# ============================================================================
# Neo4j Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_neo4j_driver() -> MagicMock:
    """Create a mock Neo4j driver with session context manager.

    Returns:
        Mock driver with properly configured session() chain
    """
    driver = MagicMock()
    session = MagicMock()

    driver.session.return_value.__enter__ = MagicMock(return_value=session)
    driver.session.return_value.__exit__ = MagicMock(return_value=None)

    return driver


@pytest.fixture
def mock_neo4j_session(mock_neo4j_driver: MagicMock) -> MagicMock:
    """Get the mock session from a mock driver."""
    return mock_neo4j_driver.session.return_value.__enter__.return_value
