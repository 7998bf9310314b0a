from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from .bundle import (
    ENTITIES_FILE,
    MAPPED_RELATIONSHIPS_FILE,
    RELATIONSHIPS_FILE,
    write_job_state,
    write_manifest,
)
from .collector import collect
from .config import get_settings
from .errors import IntegrationError
from .steps import STEPS
from .storage import (
    Neo4jLoader,
    load_jsonl_entities,
    load_jsonl_mapped_relationships,
    load_jsonl_relationships,
)

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="OktaHound collector CLI")
    parser.add_argument("command", choices=["collect", "load"], help="command to run")
    parser.add_argument("--output", "-o", default="oktahound-output", help="directory for output bundle")
    parser.add_argument("--input", "-i", help="bundle directory to load (load only)")
    parser.add_argument(
        "--steps",
        nargs="+",
        choices=[step.id for step in STEPS],
        help="steps to run, dependencies included (default: all)",
    )
    parser.add_argument("--log-level", help="logging level (default: OKTAHOUND_LOG_LEVEL or INFO)")
    parser.add_argument("--uri", help="Neo4j URI override")
    parser.add_argument("--user", help="Neo4j user override")
    parser.add_argument("--password", help="Neo4j password override")
    parser.add_argument("--batch-size", type=int, default=1000, help="rows per Neo4j write transaction")
    return parser.parse_args(argv)


def run_collect(args: argparse.Namespace) -> None:
    settings = get_settings()
    manifest, job_state = collect(settings, step_ids=args.steps)
    output_dir = Path(args.output)

    paths = write_job_state(job_state, output_dir)
    manifest_path = write_manifest(manifest, output_dir)
    print(
        json.dumps(
            {
                "manifest": str(manifest_path),
                "outputs": {name: str(path) for name, path in paths.items()},
                "counts": job_state.summary(),
                "failed_steps": [s.id for s in manifest.steps if s.status == "error"],
            },
            indent=2,
        )
    )


def run_load(args: argparse.Namespace) -> None:
    settings = get_settings()
    input_dir = Path(args.input or args.output)
    entities = load_jsonl_entities(input_dir / ENTITIES_FILE)
    relationships = load_jsonl_relationships(input_dir / RELATIONSHIPS_FILE)
    mapped_path = input_dir / MAPPED_RELATIONSHIPS_FILE
    mapped = load_jsonl_mapped_relationships(mapped_path) if mapped_path.exists() else []

    loader = Neo4jLoader(
        uri=args.uri or settings.neo4j_uri,
        user=args.user or settings.neo4j_user,
        password=args.password if args.password is not None else settings.neo4j_password,
        batch_size=args.batch_size,
    )
    loader.load(entities, relationships, mapped)
    print(
        json.dumps(
            {
                "loaded_entities": len(entities),
                "loaded_relationships": len(relationships),
                "loaded_mapped_relationships": len(mapped),
            },
            indent=2,
        )
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    level = (args.log_level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        if args.command == "collect":
            run_collect(args)
        elif args.command == "load":
            run_load(args)
    except IntegrationError as exc:
        log.error("%s", exc.message)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
