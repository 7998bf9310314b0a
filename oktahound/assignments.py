"""Map Okta AWS role assignments to AWS IAM role relationships.

When an Okta application represents access to an AWS account (the
application entity has an ``aws_account_id``), the application user or
group profile may carry a ``role`` or ``samlRoles`` value naming the IAM
roles that user or group may assume:

- primary SAML roles are listed by role name alone, local to the app's account
- secondary SAML roles are written ``Account Name -- Role Name`` or
  ``[Account Alias] -- Role Name``

The IAM roles themselves come from a separate AWS sync, so the
relationships never create their target.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from .constants import AWS_IAM_ROLE_ENTITY_TYPE
from .graph import MappedRelationship, RelationshipDirection
from .util import to_array

logger = logging.getLogger(__name__)

COMPOSITE_ROLE_PATTERN = re.compile(r"\[?([a-zA-Z0-9_-]+)\]? -- ([a-zA-Z0-9_-]+)")

ASSIGNED = "ASSIGNED"


def map_aws_role_assignment(
    source_key: str,
    role: Optional[str],
    relationship_type: str,
    aws_account_id: Optional[str],
) -> Optional[MappedRelationship]:
    """Resolve one role string to a mapped relationship, or ``None`` when empty.

    Args:
        source_key: Key of the user or group holding the assignment
        role: Role value from the application user/group profile
        relationship_type: Relationship type to emit
        aws_account_id: Account id of the AWS application

    Example:
        >>> rel = map_aws_role_assignment("00u1", "[Prod] -- Admin", "t", "123456789012")
        >>> rel.key
        '00u1|assigned|Prod|Admin'
    """
    if not role:
        return None

    match = COMPOSITE_ROLE_PATTERN.search(role)
    if match:
        account_name, role_name = match.group(1), match.group(2)
        return MappedRelationship(
            key=f"{source_key}|assigned|{account_name}|{role_name}",
            type=relationship_type,
            relationship_class=ASSIGNED,
            source_key=source_key,
            direction=RelationshipDirection.REVERSE,
            target_filter_keys=("_type", "role_name", "tag.AccountName"),
            target_entity={
                "_class": "AccessRole",
                "_type": AWS_IAM_ROLE_ENTITY_TYPE,
                "role_name": role_name,
                "name": role_name,
                "display_name": role_name,
                "tag.AccountName": account_name,
            },
            skip_target_creation=True,
            properties={"display_name": ASSIGNED},
        )

    role_arn = f"arn:aws:iam::{aws_account_id}:role/{role}"
    return MappedRelationship(
        key=f"{source_key}|assigned|{role_arn}",
        type=relationship_type,
        relationship_class=ASSIGNED,
        source_key=source_key,
        direction=RelationshipDirection.REVERSE,
        target_filter_keys=("_type", "_key"),
        target_entity={
            "_class": "AccessRole",
            "_type": AWS_IAM_ROLE_ENTITY_TYPE,
            "_key": role_arn,
            "role_name": role,
            "name": role,
            "display_name": role,
        },
        skip_target_creation=True,
        properties={"display_name": ASSIGNED},
    )


def collect_aws_role_assignments(
    source_key: str,
    profile: Optional[Dict[str, Any]],
    relationship_type: str,
    aws_account_id: Optional[str],
) -> List[MappedRelationship]:
    """Resolve the ``role`` and ``samlRoles`` values of a profile, without duplicates."""
    profile = profile or {}
    roles = to_array(profile.get("role")) + to_array(profile.get("samlRoles"))
    relationships: Dict[str, MappedRelationship] = {}
    for role in roles:
        if not isinstance(role, str):
            logger.debug("Ignoring non-string role value for %s: %r", source_key, role)
            continue
        relationship = map_aws_role_assignment(source_key, role, relationship_type, aws_account_id)
        if relationship is not None:
            relationships.setdefault(relationship.key, relationship)
    return list(relationships.values())
