import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence

from neo4j import GraphDatabase

from .graph import Entity, MappedRelationship, Relationship, RelationshipDirection

logger = logging.getLogger(__name__)


def stream_jsonl(path: Path) -> Iterator[dict]:
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                yield json.loads(line)


def load_jsonl_entities(path: Path) -> List[Entity]:
    return [Entity.from_dict(rec) for rec in stream_jsonl(path)]


def load_jsonl_relationships(path: Path) -> List[Relationship]:
    return [Relationship.from_dict(rec) for rec in stream_jsonl(path)]


def load_jsonl_mapped_relationships(path: Path) -> List[MappedRelationship]:
    return [MappedRelationship.from_dict(rec) for rec in stream_jsonl(path)]


def _chunk(seq, size: int):
    for i in range(0, len(seq), size):
        yield seq[i : i + size]


def _mapped_query(reverse: bool, create_target: bool) -> str:
    if create_target:
        target = "MERGE (target:Entity {_key: row.target_key}) ON CREATE SET target += row.target"
    else:
        target = (
            "MATCH (target:Entity) "
            "WHERE all(k IN keys(row.filter) WHERE target[k] = row.filter[k])"
        )
    if reverse:
        edge = "(target)-[rel:RELATES {_key: row.key}]->(source)"
    else:
        edge = "(source)-[rel:RELATES {_key: row.key}]->(target)"
    return f"""
        UNWIND $rels AS row
        MATCH (source:Entity {{_key: row.source_key}})
        {target}
        MERGE {edge}
        SET rel += row.props
        """


def _mapped_row(rel: MappedRelationship) -> Dict[str, Any]:
    target_filter = rel.target_filter()
    return {
        "key": rel.key,
        "source_key": rel.source_key,
        "filter": target_filter,
        "target": dict(rel.target_entity),
        "target_key": rel.target_entity.get("_key") or "|".join(str(v) for v in target_filter.values()),
        "props": {"_type": rel.type, "_class": rel.relationship_class, **rel.properties},
    }


class Neo4jLoader:
    """Loader for Neo4j. Uses MERGE on ``_key`` so repeated runs upsert; batches for large graphs."""

    def __init__(self, uri: str, user: str, password: str, batch_size: int = 1000) -> None:
        self.uri = uri
        self.user = user
        self.password = password
        self.batch_size = batch_size

    def load(
        self,
        entities: Sequence[Entity],
        relationships: Sequence[Relationship],
        mapped_relationships: Sequence[MappedRelationship] = (),
    ) -> None:
        driver = GraphDatabase.driver(self.uri, auth=(self.user, self.password))
        try:
            with driver.session() as session:
                for batch in _chunk(list(entities), self.batch_size):
                    session.execute_write(self._merge_entities, batch)
                for batch in _chunk(list(relationships), self.batch_size):
                    session.execute_write(self._merge_relationships, batch)
                for batch in _chunk(list(mapped_relationships), self.batch_size):
                    session.execute_write(self._merge_mapped_relationships, batch)
        finally:
            driver.close()
        logger.info(
            "Loaded %d entities, %d relationships and %d mapped relationships into %s",
            len(entities),
            len(relationships),
            len(mapped_relationships),
            self.uri,
        )

    @staticmethod
    def _merge_entities(tx, batch: List[Entity]) -> None:
        tx.run(
            """
            UNWIND $entities AS e
            MERGE (node:Entity {_key: e._key})
            SET node += e
            """,
            entities=[e.to_dict() for e in batch],
        )

    @staticmethod
    def _merge_relationships(tx, batch: List[Relationship]) -> None:
        tx.run(
            """
            UNWIND $rels AS r
            MATCH (src:Entity {_key: r._fromEntityKey})
            MATCH (dst:Entity {_key: r._toEntityKey})
            MERGE (src)-[rel:RELATES {_key: r._key}]->(dst)
            SET rel += r
            """,
            rels=[r.to_dict() for r in batch],
        )

    @staticmethod
    def _merge_mapped_relationships(tx, batch: List[MappedRelationship]) -> None:
        groups: Dict[tuple, List[Dict[str, Any]]] = {}
        for rel in batch:
            variant = (rel.direction is RelationshipDirection.REVERSE, not rel.skip_target_creation)
            groups.setdefault(variant, []).append(_mapped_row(rel))
        for (reverse, create_target), rows in groups.items():
            tx.run(_mapped_query(reverse, create_target), rels=rows)
