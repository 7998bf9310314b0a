"""Job-scoped store for the entities and relationships produced by a run.

Steps add entities and relationships here; later steps look entities up
by key. Keys are unique per run.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Union

from .errors import DuplicateKeyError
from .graph import Entity, MappedRelationship, Relationship

AnyRelationship = Union[Relationship, MappedRelationship]


class JobState:
    """In-memory graph accumulated over one sync run.

    Example:
        >>> state = JobState()
        >>> state.add_entity(entity)
        >>> state.find_entity(entity.key) is entity
        True
    """

    def __init__(self) -> None:
        self._entities: Dict[str, Entity] = {}
        self._relationships: Dict[str, AnyRelationship] = {}
        self._data: Dict[str, Any] = {}

    @property
    def entities(self) -> List[Entity]:
        return list(self._entities.values())

    @property
    def relationships(self) -> List[Relationship]:
        return [r for r in self._relationships.values() if isinstance(r, Relationship)]

    @property
    def mapped_relationships(self) -> List[MappedRelationship]:
        return [r for r in self._relationships.values() if isinstance(r, MappedRelationship)]

    def add_entity(self, entity: Entity) -> Entity:
        if entity.key in self._entities:
            raise DuplicateKeyError(entity.key)
        self._entities[entity.key] = entity
        return entity

    def add_entities(self, entities: List[Entity]) -> List[Entity]:
        return [self.add_entity(e) for e in entities]

    def find_entity(self, key: str) -> Optional[Entity]:
        return self._entities.get(key)

    def has_key(self, key: str) -> bool:
        return key in self._entities or key in self._relationships

    def iterate_entities(self, entity_type: str) -> Iterator[Entity]:
        for entity in list(self._entities.values()):
            if entity.type == entity_type:
                yield entity

    def add_relationship(self, relationship: AnyRelationship) -> AnyRelationship:
        if relationship.key in self._relationships:
            raise DuplicateKeyError(relationship.key)
        self._relationships[relationship.key] = relationship
        return relationship

    def set_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get_data(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def summary(self) -> Dict[str, int]:
        return {
            "entities": len(self._entities),
            "relationships": len(self.relationships),
            "mapped_relationships": len(self.mapped_relationships),
        }
