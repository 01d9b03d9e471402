from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from app.application.interfaces import ICaptionPipelineAdapters
from app.application.pipeline.base import Pipeline, PipelineContext
from app.application.pipeline.captions.builder import build_caption_pipeline
from app.application.use_cases.outcomes import OutcomeStatus, SegmentCaptionOutcome
from app.core.exceptions import CaptionProcessingError
from app.core.pyd_schemas import AlignmentResult

logger = logging.getLogger(__name__)


class CaptionSegmentUseCase:
    """Caption one interview segment.

    Processing errors (a corrupt alignment, an unreachable aligner) end the
    segment with a FAILED outcome so the caller can move on to the next one.
    """

    def __init__(
        self, adapters: ICaptionPipelineAdapters, *, pipeline: Optional[Pipeline] = None
    ) -> None:
        self._adapters = adapters
        self._pipeline = pipeline

    async def execute(
        self,
        *,
        duration_ms: int,
        transcript: Optional[str] = None,
        audio_path: Optional[str] = None,
        alignment: AlignmentResult | Dict[str, Any] | None = None,
    ) -> SegmentCaptionOutcome:
        ctx = PipelineContext(
            input={
                "duration_ms": duration_ms,
                "transcript": transcript,
                "audio_path": audio_path,
                "alignment": alignment,
            }
        )
        run_id = ctx.ensure_run_id()
        pipeline = self._pipeline or build_caption_pipeline(self._adapters)

        try:
            result = await pipeline.execute(ctx)
        except CaptionProcessingError as e:
            logger.error("[run_id=%s] Captioning failed: %s", run_id, e.message)
            return SegmentCaptionOutcome(
                status=OutcomeStatus.FAILED,
                error=e.message,
                error_code=e.error_code,
                run_id=run_id,
            )

        ctx = result["context"]
        return SegmentCaptionOutcome(
            status=OutcomeStatus.COMPLETED if result["success"] else OutcomeStatus.FAILED,
            captions=ctx.get("captions"),
            vtt=ctx.get("vtt", ""),
            tsync=ctx.get("tsync", []),
            caption_dump=ctx.get("caption_dump", ""),
            error=result["error"],
            run_id=run_id,
        )
