#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

"""CLI runner for named entity resolution of one story.

Takes Stanford NER output (token<TAB>TAG per line) and the story transcript,
prints resolved and unresolved organizations and places as JSON.
"""

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.application.use_cases.resolve_story_entities import ResolveStoryEntitiesUseCase
from app.core.logging_config import configure_logging
from app.infrastructure.adapters.bundles.entities import get_entity_adapter_bundle


def _entity_dicts(entities) -> list:
    return [asdict(e) for e in entities]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Resolve organizations, US places and world places mentioned in one story transcript",
    )
    parser.add_argument("--ner", required=True, help="Stanford NER output file (token<TAB>TAG)")
    parser.add_argument("--transcript", required=True, help="Story transcript text file")
    parser.add_argument(
        "--data-path",
        default=None,
        help="Directory with the reference tables (default: ENTITY_DATA_PATH)",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(level=args.log_level)

    ner_path = Path(args.ner)
    transcript_path = Path(args.transcript)
    for p in (ner_path, transcript_path):
        if not p.exists():
            raise FileNotFoundError(f"Input file not found: {p}")

    adapters = get_entity_adapter_bundle(data_path=args.data_path)
    outcome = asyncio.run(
        ResolveStoryEntitiesUseCase(adapters).execute(
            transcript=transcript_path.read_text(encoding="utf-8"),
            ner_path=str(ner_path),
        )
    )

    report = {
        "status": outcome.status.value,
        "error": outcome.error,
        "conflict": outcome.conflict,
        "organizations": {
            "resolved": _entity_dicts(outcome.organizations_resolved),
            "unresolved": _entity_dicts(outcome.organizations_unresolved),
        },
        "locations": {
            "resolved": _entity_dicts(outcome.locations_resolved),
            "international": _entity_dicts(outcome.international_locations_resolved),
            "unresolved": _entity_dicts(outcome.locations_unresolved),
        },
    }
    print(json.dumps(report, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
