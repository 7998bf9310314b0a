"""Tests for oktahound.collector step planning and execution."""

from __future__ import annotations

import pytest

from oktahound.collector import collect, order_steps, select_steps
from oktahound.errors import IntegrationValidationError, ProviderAuthenticationError
from oktahound.steps import STEPS, Step


def noop(context):
    return None


def boom(context):
    raise RuntimeError("step exploded")


class TestPlanning:
    """Tests for select_steps and order_steps."""

    def test_default_order_respects_dependencies(self):
        ordered = [s.id for s in order_steps(STEPS)]

        for step in STEPS:
            for dep in step.depends_on:
                assert ordered.index(dep) < ordered.index(step.id)

    def test_out_of_order_declaration(self):
        steps = [Step("b", "B", noop, ["a"]), Step("a", "A", noop)]

        assert [s.id for s in order_steps(steps)] == ["a", "b"]

    def test_cycle_rejected(self):
        steps = [Step("a", "A", noop, ["b"]), Step("b", "B", noop, ["a"])]

        with pytest.raises(IntegrationValidationError):
            order_steps(steps)

    def test_unknown_dependency_rejected(self):
        with pytest.raises(IntegrationValidationError):
            order_steps([Step("a", "A", noop, ["missing"])])

    def test_select_adds_dependencies(self):
        selected = [s.id for s in select_steps(STEPS, ["fetch-rules"])]

        assert selected == ["fetch-account", "fetch-users", "fetch-groups", "fetch-rules"]

    def test_select_unknown_step(self):
        with pytest.raises(IntegrationValidationError):
            select_steps(STEPS, ["fetch-everything"])


class TestCollect:
    """Tests for a full run against the sample org."""

    def test_full_run(self, settings, fake_api_client):
        manifest, job_state = collect(settings, api_client=fake_api_client)

        assert fake_api_client.verified
        assert [s.status for s in manifest.steps] == ["ok"] * len(STEPS)
        assert manifest.account_key == "okta_account_acme"
        assert manifest.finished_at is not None
        assert job_state.summary() == {"entities": 10, "relationships": 14, "mapped_relationships": 4}

    def test_step_counts_recorded(self, settings, fake_api_client):
        manifest, _ = collect(settings, api_client=fake_api_client)

        users = manifest.step("fetch-users")
        assert users.entities == 3
        assert users.relationships == 3

    def test_failed_step_skips_dependants_only(self, settings, fake_api_client):
        steps = [
            Step("a", "A", noop),
            Step("b", "B", boom, ["a"]),
            Step("c", "C", noop, ["b"]),
            Step("d", "D", noop, ["a"]),
        ]

        manifest, _ = collect(settings, api_client=fake_api_client, steps=steps)

        assert manifest.step("a").status == "ok"
        assert manifest.step("b").status == "error"
        assert manifest.step("b").errors == ["step exploded"]
        assert manifest.step("c").status == "skipped"
        assert manifest.step("c").detail == "dependency-failed"
        assert manifest.step("d").status == "ok"
        assert manifest.failed

    def test_authentication_failure_aborts(self, settings, fake_api_client):
        def reject():
            raise ProviderAuthenticationError(endpoint="https://acme.okta.com/api/v1/users?limit=1", status=401)

        fake_api_client.verify_authentication = reject

        with pytest.raises(ProviderAuthenticationError):
            collect(settings, api_client=fake_api_client)

    def test_authentication_failure_in_step_aborts(self, settings, fake_api_client):
        def expired(context):
            raise ProviderAuthenticationError(status=401)

        steps = [Step("a", "A", expired), Step("b", "B", noop)]

        with pytest.raises(ProviderAuthenticationError):
            collect(settings, api_client=fake_api_client, steps=steps)

    def test_invalid_configuration(self, settings, fake_api_client):
        settings.okta_api_key = ""

        with pytest.raises(IntegrationValidationError):
            collect(settings, api_client=fake_api_client)

        assert not fake_api_client.verified

    def test_selected_steps_only(self, settings, fake_api_client):
        manifest, job_state = collect(settings, api_client=fake_api_client, step_ids=["fetch-users"])

        assert [s.id for s in manifest.steps] == ["fetch-account", "fetch-users"]
        assert job_state.find_entity("00g1") is None
