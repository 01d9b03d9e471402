from __future__ import annotations

from typing import Optional

from app.application.interfaces import ICaptionPipelineAdapters
from app.application.pipeline.base import Pipeline, make_logging_middleware
from app.application.pipeline.factory import PipelineFactory
from app.application.pipeline.captions.steps.align_transcript import AlignTranscriptStep
from app.application.pipeline.captions.steps.format_alignment import FormatAlignmentStep
from app.application.pipeline.captions.steps.generate_captions import GenerateCaptionsStep
from app.application.pipeline.captions.steps.export_captions import ExportCaptionsStep


def build_caption_pipeline(
    adapters: ICaptionPipelineAdapters,
    *,
    enable_logging_middleware: bool = True,
    fail_fast: bool = True,
    vtt_note: Optional[str] = None,
    align_retries: Optional[int] = None,
) -> Pipeline:

    middlewares = [make_logging_middleware()] if enable_logging_middleware else []
    factory = PipelineFactory(middlewares=middlewares, fail_fast=fail_fast)
    factory.add(AlignTranscriptStep(getattr(adapters, "aligner", None), retries=align_retries))
    factory.add(FormatAlignmentStep(adapters.formatter))
    factory.add(GenerateCaptionsStep(adapters.captioner))
    factory.add(ExportCaptionsStep(vtt_note))

    return factory.build()
