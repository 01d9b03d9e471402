from __future__ import annotations

from typing import Protocol

from app.core.caption_models import FormattedAlignment
from app.core.pyd_schemas import AlignmentResult


class IAlignmentFormatter(Protocol):
    """Repairs raw word timings and splits them into cleaned, contiguous paragraphs."""

    def format_alignment(self, alignment: AlignmentResult, duration: int) -> FormattedAlignment:
        ...
