"""Tests for oktahound.graph record types."""

from __future__ import annotations

from oktahound.graph import (
    Entity,
    MappedRelationship,
    Relationship,
    RelationshipDirection,
    create_direct_relationship,
    generate_relationship_type,
)


class TestGenerateRelationshipType:
    def test_shared_provider_prefix_dropped(self):
        assert generate_relationship_type("HAS", "okta_account", "okta_user_group") == "okta_account_has_user_group"

    def test_foreign_target_kept(self):
        assert generate_relationship_type("ASSIGNED", "okta_user", "mfa_device") == "okta_user_assigned_mfa_device"

    def test_same_type(self):
        assert generate_relationship_type("HAS", "okta_user", "okta_user") == "okta_user_has_okta_user"


class TestDirectRelationship:
    def test_key_and_endpoints(self):
        group = Entity("00g1", "okta_user_group", "UserGroup")
        user = Entity("00u1", "okta_user", "User")

        rel = create_direct_relationship("HAS", group, user, properties={"note": "x"})

        assert rel.key == "00g1|has|00u1"
        assert rel.type == "okta_user_group_has_user"
        assert rel.to_dict() == {
            "_key": "00g1|has|00u1",
            "_type": "okta_user_group_has_user",
            "_class": "HAS",
            "_fromEntityKey": "00g1",
            "_toEntityKey": "00u1",
            "display_name": "HAS",
            "note": "x",
        }


class TestSerialization:
    """Records read back from their dict form compare equal."""

    def test_entity(self):
        entity = Entity("00u1", "okta_user", "User", {"display_name": "alice"})

        assert Entity.from_dict(entity.to_dict()) == entity

    def test_relationship(self):
        rel = Relationship("a|has|b", "t", "HAS", "a", "b", {"display_name": "HAS"})

        assert Relationship.from_dict(rel.to_dict()) == rel

    def test_mapped_relationship_layout(self):
        rel = MappedRelationship(
            key="00u1|assigned|Prod|Admin",
            type="aws_iam_role_assigned_okta_user",
            relationship_class="ASSIGNED",
            source_key="00u1",
            direction=RelationshipDirection.REVERSE,
            target_filter_keys=("_type", "role_name", "tag.AccountName"),
            target_entity={"_type": "aws_iam_role", "role_name": "Admin", "tag.AccountName": "Prod"},
        )

        data = rel.to_dict()

        assert data["_mapping"]["relationshipDirection"] == "REVERSE"
        assert data["_mapping"]["targetFilterKeys"] == [["_type", "role_name", "tag.AccountName"]]
        assert data["_mapping"]["skipTargetCreation"] is True
        assert MappedRelationship.from_dict(data) == rel
