from __future__ import annotations

from types import SimpleNamespace
from typing import Optional

from app.application.interfaces import ICaptionPipelineAdapters
from app.core.config import Settings, settings as default_settings
from app.infrastructure.adapters import (
    AlignmentFormatter,
    CaptioningOptions,
    GentleTranscriptionAligner,
    TextCaptioner,
)


def get_caption_adapter_bundle(
    *,
    settings: Optional[Settings] = None,
    with_aligner: bool = True,
    output_dir: Optional[str] = None,
) -> ICaptionPipelineAdapters:
    """Provide the adapters container for the caption pipeline.

    ``with_aligner=False`` leaves the aligner out for callers that always
    supply a ready alignment.
    """
    s = settings or default_settings
    formatter = AlignmentFormatter(s.max_unaligned_trailing_words_allowed)
    return SimpleNamespace(
        aligner=GentleTranscriptionAligner(output_dir=output_dir) if with_aligner else None,
        formatter=formatter,
        captioner=TextCaptioner(CaptioningOptions.from_settings(s), formatter=formatter),
    )
