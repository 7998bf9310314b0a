"""Tests for oktahound.assignments AWS role mapping."""

from __future__ import annotations

from oktahound.assignments import collect_aws_role_assignments, map_aws_role_assignment
from oktahound.constants import AWS_IAM_ROLE_ENTITY_TYPE, USER_AWS_IAM_ROLE_RELATIONSHIP_TYPE
from oktahound.graph import RelationshipDirection

ACCOUNT_ID = "123456789012"
REL_TYPE = USER_AWS_IAM_ROLE_RELATIONSHIP_TYPE


class TestMapAwsRoleAssignment:
    """Tests for single role resolution."""

    def test_plain_role_targets_arn(self):
        rel = map_aws_role_assignment("00u1", "Admin", REL_TYPE, ACCOUNT_ID)

        arn = "arn:aws:iam::123456789012:role/Admin"
        assert rel.key == f"00u1|assigned|{arn}"
        assert rel.type == REL_TYPE
        assert rel.relationship_class == "ASSIGNED"
        assert rel.direction is RelationshipDirection.REVERSE
        assert rel.skip_target_creation is True
        assert rel.target_filter_keys == ("_type", "_key")
        assert rel.target_filter() == {"_type": AWS_IAM_ROLE_ENTITY_TYPE, "_key": arn}
        assert rel.target_entity["role_name"] == "Admin"

    def test_bracketed_account_alias(self):
        rel = map_aws_role_assignment("00g1", "[Prod] -- Admin", REL_TYPE, ACCOUNT_ID)

        assert rel.key == "00g1|assigned|Prod|Admin"
        assert rel.target_filter_keys == ("_type", "role_name", "tag.AccountName")
        assert rel.target_filter() == {
            "_type": AWS_IAM_ROLE_ENTITY_TYPE,
            "role_name": "Admin",
            "tag.AccountName": "Prod",
        }

    def test_unbracketed_account_name(self):
        rel = map_aws_role_assignment("00g1", "Staging -- ReadOnly", REL_TYPE, ACCOUNT_ID)

        assert rel.key == "00g1|assigned|Staging|ReadOnly"
        assert "_key" not in rel.target_entity

    def test_empty_role(self):
        assert map_aws_role_assignment("00u1", "", REL_TYPE, ACCOUNT_ID) is None
        assert map_aws_role_assignment("00u1", None, REL_TYPE, ACCOUNT_ID) is None


class TestCollectAwsRoleAssignments:
    def test_role_and_saml_roles(self):
        profile = {"role": "Admin", "samlRoles": ["ReadOnly", "[Prod] -- Admin"]}

        rels = collect_aws_role_assignments("00g1", profile, REL_TYPE, ACCOUNT_ID)

        assert [r.key for r in rels] == [
            "00g1|assigned|arn:aws:iam::123456789012:role/Admin",
            "00g1|assigned|arn:aws:iam::123456789012:role/ReadOnly",
            "00g1|assigned|Prod|Admin",
        ]

    def test_duplicates_collapse(self):
        profile = {"role": "Admin", "samlRoles": ["Admin"]}

        rels = collect_aws_role_assignments("00u1", profile, REL_TYPE, ACCOUNT_ID)

        assert len(rels) == 1

    def test_non_string_values_ignored(self):
        profile = {"role": 7, "samlRoles": [None, {"x": 1}, "Admin"]}

        rels = collect_aws_role_assignments("00u1", profile, REL_TYPE, ACCOUNT_ID)

        assert [r.target_entity["role_name"] for r in rels] == ["Admin"]

    def test_missing_profile(self):
        assert collect_aws_role_assignments("00u1", None, REL_TYPE, ACCOUNT_ID) == []
