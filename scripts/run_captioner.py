#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

"""CLI runner for the caption pipeline.

Reads a Gentle words.json (or aligns an audio file) and prints WebVTT, the
transcript sync pairs or a diagnostic dump to stdout.
"""

# Ensure project root is on sys.path so 'app' is importable when running this file directly
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.application.use_cases.caption_segment import CaptionSegmentUseCase
from app.core.logging_config import configure_logging
from app.infrastructure.adapters.bundles.captions import get_caption_adapter_bundle
from utils.gentle_utils import load_alignment_file


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate captions for one segment from a Gentle alignment and print them to stdout",
    )
    parser.add_argument("--words", help="Path to words.json produced by Gentle")
    parser.add_argument("--audio", help="Audio file to align when --words is not given")
    parser.add_argument("--transcript", help="Transcript text file (required with --audio)")
    parser.add_argument("--duration-ms", type=int, required=True, help="Segment duration in ms")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--tsync", action="store_true", help="Print transcript sync pairs as JSON")
    output.add_argument("--dump", action="store_true", help="Print the diagnostic cue dump")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(level=args.log_level)

    alignment = None
    transcript = None
    if args.words:
        words_path = Path(args.words)
        if not words_path.exists():
            raise FileNotFoundError(f"words.json not found: {words_path}")
        alignment = load_alignment_file(str(words_path))
    elif args.audio and args.transcript:
        transcript = Path(args.transcript).read_text(encoding="utf-8")
    else:
        raise SystemExit("Either --words or both --audio and --transcript must be provided")

    adapters = get_caption_adapter_bundle(with_aligner=alignment is None)
    outcome = asyncio.run(
        CaptionSegmentUseCase(adapters).execute(
            duration_ms=args.duration_ms,
            transcript=transcript,
            audio_path=args.audio,
            alignment=alignment,
        )
    )
    if not outcome.ok:
        raise SystemExit(f"Captioning failed: {outcome.error}")

    if args.tsync:
        print(json.dumps([p.model_dump() for p in outcome.tsync], indent=2))
    elif args.dump:
        print(outcome.caption_dump, end="")
    else:
        print(outcome.vtt, end="")


if __name__ == "__main__":
    main()
