from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RelationshipDirection(str, Enum):
    FORWARD = "FORWARD"
    REVERSE = "REVERSE"


@dataclass
class Entity:
    key: str
    type: str
    entity_class: str
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> Optional[str]:
        return self.properties.get("display_name")

    def to_dict(self) -> Dict[str, Any]:
        return {"_key": self.key, "_type": self.type, "_class": self.entity_class, **self.properties}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        props = {k: v for k, v in data.items() if k not in ("_key", "_type", "_class")}
        return cls(key=data["_key"], type=data["_type"], entity_class=data["_class"], properties=props)


@dataclass
class Relationship:
    key: str
    type: str
    relationship_class: str
    from_key: str
    to_key: str
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_key": self.key,
            "_type": self.type,
            "_class": self.relationship_class,
            "_fromEntityKey": self.from_key,
            "_toEntityKey": self.to_key,
            **self.properties,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Relationship":
        reserved = ("_key", "_type", "_class", "_fromEntityKey", "_toEntityKey")
        return cls(
            key=data["_key"],
            type=data["_type"],
            relationship_class=data["_class"],
            from_key=data["_fromEntityKey"],
            to_key=data["_toEntityKey"],
            properties={k: v for k, v in data.items() if k not in reserved},
        )


@dataclass
class MappedRelationship:
    """Relationship whose target is matched in the wider graph by filter keys.

    ``target_filter_keys`` names the properties of ``target_entity`` used to
    find the target. When ``skip_target_creation`` is set the relationship
    is dropped if no target matches.
    """

    key: str
    type: str
    relationship_class: str
    source_key: str
    direction: RelationshipDirection
    target_filter_keys: Tuple[str, ...]
    target_entity: Dict[str, Any]
    skip_target_creation: bool = True
    properties: Dict[str, Any] = field(default_factory=dict)

    def target_filter(self) -> Dict[str, Any]:
        return {k: self.target_entity.get(k) for k in self.target_filter_keys}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_key": self.key,
            "_type": self.type,
            "_class": self.relationship_class,
            "_mapping": {
                "sourceEntityKey": self.source_key,
                "relationshipDirection": self.direction.value,
                "targetFilterKeys": [list(self.target_filter_keys)],
                "targetEntity": dict(self.target_entity),
                "skipTargetCreation": self.skip_target_creation,
            },
            **self.properties,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MappedRelationship":
        mapping = data["_mapping"]
        return cls(
            key=data["_key"],
            type=data["_type"],
            relationship_class=data["_class"],
            source_key=mapping["sourceEntityKey"],
            direction=RelationshipDirection(mapping["relationshipDirection"]),
            target_filter_keys=tuple(mapping["targetFilterKeys"][0]),
            target_entity=mapping["targetEntity"],
            skip_target_creation=mapping.get("skipTargetCreation", True),
            properties={k: v for k, v in data.items() if k not in ("_key", "_type", "_class", "_mapping")},
        )


def _provider_prefix(entity_type: str) -> str:
    head, sep, _ = entity_type.partition("_")
    return f"{head}{sep}" if sep else ""


def generate_relationship_type(relationship_class: str, from_type: str, to_type: str) -> str:
    """Build a relationship type name, dropping the target's repeated provider prefix.

    Example:
        >>> generate_relationship_type("HAS", "okta_account", "okta_user_group")
        'okta_account_has_user_group'
    """
    prefix = _provider_prefix(from_type)
    target = to_type
    if prefix and to_type.startswith(prefix) and to_type != from_type:
        target = to_type[len(prefix):]
    return f"{from_type}_{relationship_class.lower()}_{target}"


def create_direct_relationship(
    relationship_class: str,
    from_entity: Entity,
    to_entity: Entity,
    properties: Optional[Dict[str, Any]] = None,
) -> Relationship:
    return Relationship(
        key=f"{from_entity.key}|{relationship_class.lower()}|{to_entity.key}",
        type=generate_relationship_type(relationship_class, from_entity.type, to_entity.type),
        relationship_class=relationship_class,
        from_key=from_entity.key,
        to_key=to_entity.key,
        properties={"display_name": relationship_class, **(properties or {})},
    )
