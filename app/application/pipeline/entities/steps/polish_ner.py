from __future__ import annotations

import logging
from pathlib import Path

from app.application.interfaces import INERPolisher
from app.application.pipeline.base import BaseStep, PipelineContext


class PolishStanfordNERStep(BaseStep):
    """Turns Stanford NER tagger output into entity candidates.

    Input:  transcript, ner_lines (or ner_path)
    Output: candidates
    """

    name = "polish_stanford_ner"
    required_keys = ["transcript"]

    def __init__(self, polisher: INERPolisher) -> None:
        self.polisher = polisher
        self.logger = logging.getLogger(__name__)

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        transcript: str = self.lookup(context, "transcript") or ""
        lines = self.lookup(context, "ner_lines")
        if lines is None:
            ner_path = self.lookup(context, "ner_path")
            if not ner_path:
                raise ValueError("Either ner_lines or ner_path must be provided")
            lines = Path(ner_path).read_text(encoding="utf-8").splitlines()

        candidates = self.polisher.polish(lines, transcript)
        self.logger.info("PolishStanfordNERStep: %d candidates", len(candidates))
        context.set("candidates", candidates)
