from __future__ import annotations

from typing import Optional

from app.application.pipeline.base import BaseStep, PipelineContext
from app.core.config import settings
from utils.caption_utils import to_plain_text, to_tsync, to_vtt


class ExportCaptionsStep(BaseStep):
    """Serialises the captions.

    Input:  captions, alignment, duration_ms
    Output: vtt, tsync, caption_dump

    The final sync pair is (transcript length, segment duration).
    """

    name = "export_captions"
    required_keys = ["captions", "duration_ms"]

    def __init__(self, note: Optional[str] = None) -> None:
        self.note = settings.caption_vtt_note if note is None else note

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        captions = context.get("captions")
        alignment = self.lookup(context, "alignment")
        transcript = alignment.transcript if alignment is not None else ""
        duration = int(self.lookup(context, "duration_ms"))

        context.set("vtt", to_vtt(captions, self.note))
        context.set("tsync", to_tsync(captions, len(transcript), duration))
        context.set("caption_dump", to_plain_text(captions))
