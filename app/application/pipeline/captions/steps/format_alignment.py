from __future__ import annotations

from app.application.interfaces import IAlignmentFormatter
from app.application.pipeline.base import BaseStep, PipelineContext
from app.application.pipeline.captions.steps.align_transcript import coerce_alignment


class FormatAlignmentStep(BaseStep):
    """Input: alignment, duration_ms -> Output: formatted"""

    name = "format_alignment"
    required_keys = ["alignment", "duration_ms"]

    def __init__(self, formatter: IAlignmentFormatter) -> None:
        self.formatter = formatter

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        alignment = coerce_alignment(self.lookup(context, "alignment"))
        duration = int(self.lookup(context, "duration_ms"))
        if duration < 0:
            raise ValueError("duration_ms must not be negative")
        context.set("formatted", self.formatter.format_alignment(alignment, duration))
