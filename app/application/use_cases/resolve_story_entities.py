from __future__ import annotations

import logging
from typing import Iterable, Optional

from app.application.interfaces import IEntityPipelineAdapters
from app.application.pipeline.base import Pipeline, PipelineContext
from app.application.pipeline.entities.builder import build_entity_pipeline
from app.application.use_cases.outcomes import OutcomeStatus, StoryResolutionOutcome
from app.core.entity_models import OrganizationResolution
from app.core.exceptions import CaptionProcessingError

logger = logging.getLogger(__name__)


class ResolveStoryEntitiesUseCase:
    """Polish the tagger output of one story and resolve its organizations and places."""

    def __init__(
        self, adapters: IEntityPipelineAdapters, *, pipeline: Optional[Pipeline] = None
    ) -> None:
        self._adapters = adapters
        self._pipeline = pipeline

    async def execute(
        self,
        *,
        transcript: str,
        ner_lines: Optional[Iterable[str]] = None,
        ner_path: Optional[str] = None,
    ) -> StoryResolutionOutcome:
        ctx = PipelineContext(
            input={
                "transcript": transcript,
                "ner_lines": list(ner_lines) if ner_lines is not None else None,
                "ner_path": ner_path,
            }
        )
        run_id = ctx.ensure_run_id()
        pipeline = self._pipeline or build_entity_pipeline(self._adapters)

        try:
            result = await pipeline.execute(ctx)
        except CaptionProcessingError as e:
            logger.error("[run_id=%s] Entity resolution failed: %s", run_id, e.message)
            return StoryResolutionOutcome(
                status=OutcomeStatus.FAILED,
                error=e.message,
                error_code=e.error_code,
                run_id=run_id,
            )

        ctx = result["context"]
        organizations: OrganizationResolution = ctx.get(
            "organization_resolution", OrganizationResolution()
        )
        if not result["success"]:
            status = OutcomeStatus.FAILED
        elif organizations.has_conflict:
            status = OutcomeStatus.NOT_RESOLVED
        else:
            status = OutcomeStatus.COMPLETED

        return StoryResolutionOutcome(
            status=status,
            candidates=ctx.get("candidates", []),
            organizations_resolved=organizations.resolved,
            organizations_unresolved=organizations.unresolved,
            locations_resolved=ctx.get("locations_resolved", []),
            locations_unresolved=ctx.get("locations_unresolved", []),
            international_locations_resolved=ctx.get("international_locations_resolved", []),
            conflict=organizations.conflict,
            error=result["error"],
            run_id=run_id,
        )
