from __future__ import annotations

import logging

from app.application.interfaces import ITextCaptioner
from app.application.pipeline.base import BaseStep, PipelineContext


class GenerateCaptionsStep(BaseStep):
    """Builds caption cues from the formatted alignment.

    Input:  formatted
    Output: captions, caption_validation
    """

    name = "generate_captions"
    required_keys = ["formatted"]

    def __init__(self, captioner: ITextCaptioner) -> None:
        self.captioner = captioner
        self.logger = logging.getLogger(__name__)

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        captions = self.captioner.caption_formatted(context.get("formatted"))
        context.set("captions", captions)
        context.set("caption_validation", captions.validation)
        if captions.validation is not None and captions.validation.total:
            self.logger.warning(
                "GenerateCaptionsStep: %d cue(s) outside the configured bounds",
                captions.validation.total,
            )
