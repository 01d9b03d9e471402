from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .aligner import ITranscriptionAligner
from .alignment_formatter import IAlignmentFormatter
from .captioner import ITextCaptioner


@runtime_checkable
class ICaptionPipelineAdapters(Protocol):
    aligner: Optional[ITranscriptionAligner]
    formatter: IAlignmentFormatter
    captioner: ITextCaptioner
