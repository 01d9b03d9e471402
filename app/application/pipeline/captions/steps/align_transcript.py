from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from app.application.interfaces import ITranscriptionAligner
from app.application.pipeline.base import BaseStep, PipelineContext
from app.core.config import settings
from app.core.exceptions import AlignmentServiceError, ConfigurationError
from app.core.pyd_schemas import AlignmentResult
from utils.gentle_utils import parse_alignment


def coerce_alignment(value) -> Optional[AlignmentResult]:
    """Accept an AlignmentResult or its Gentle JSON dict form."""
    if value is None or isinstance(value, AlignmentResult):
        return value
    return parse_alignment(value)


class AlignTranscriptStep(BaseStep):
    """Obtains word timings for the segment transcript.

    Input:  audio_path, transcript (or a ready ``alignment``)
    Output: alignment
    """

    name = "align_transcript"

    def __init__(
        self,
        aligner: Optional[ITranscriptionAligner],
        *,
        retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ) -> None:
        self.aligner = aligner
        self.retry_exceptions = {
            AlignmentServiceError: {
                "retries": settings.align_step_retries if retries is None else retries,
                "retry_backoff": (
                    settings.align_step_retry_backoff if retry_backoff is None else retry_backoff
                ),
            }
        }
        self.logger = logging.getLogger(__name__)

    def can_skip(self, context: PipelineContext) -> bool:
        supplied = self.lookup(context, "alignment")
        if supplied is None:
            return False
        context.set("alignment", coerce_alignment(supplied))
        return True

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        if self.aligner is None:
            raise ConfigurationError(
                "No alignment supplied and no aligner configured", config_key="aligner"
            )
        audio_path = self.lookup(context, "audio_path")
        if not audio_path or not Path(audio_path).exists():
            raise AlignmentServiceError(f"Audio file not found: {audio_path}")

        transcript: str = self.lookup(context, "transcript") or ""
        if not transcript.strip():
            raise ValueError("transcript is required to align audio")
        self.logger.info(
            "AlignTranscriptStep: aligning %s (%d transcript chars)", audio_path, len(transcript)
        )
        context.set("alignment", self.aligner.align(str(audio_path), transcript))
