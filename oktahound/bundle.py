"""On-disk bundle: one JSONL file per record kind plus the run manifest."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable

from .jobstate import JobState
from .manifest import Manifest

ENTITIES_FILE = "entities.jsonl"
RELATIONSHIPS_FILE = "relationships.jsonl"
MAPPED_RELATIONSHIPS_FILE = "mapped_relationships.jsonl"
MANIFEST_FILE = "manifest.json"


def _write_lines(records: Iterable[Dict[str, Any]], path: Path) -> Path:
    with path.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(json.dumps(rec))
            f.write("\n")
    return path


def write_job_state(job_state: JobState, output_dir: Path) -> Dict[str, Path]:
    """Write the accumulated graph, returning the path of each file by record kind."""
    output_dir.mkdir(parents=True, exist_ok=True)
    views = {
        "entities": (job_state.entities, ENTITIES_FILE),
        "relationships": (job_state.relationships, RELATIONSHIPS_FILE),
        "mapped_relationships": (job_state.mapped_relationships, MAPPED_RELATIONSHIPS_FILE),
    }
    return {
        kind: _write_lines((r.to_dict() for r in records), output_dir / filename)
        for kind, (records, filename) in views.items()
    }


def write_manifest(manifest: Manifest, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / MANIFEST_FILE
    path.write_text(manifest.to_json(), encoding="utf-8")
    return path
