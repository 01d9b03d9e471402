from __future__ import annotations

from typing import Protocol

from app.core.caption_models import FormattedAlignment, TextCaptions
from app.core.pyd_schemas import AlignmentResult


class ITextCaptioner(Protocol):
    def caption_text(self, alignment: AlignmentResult, duration: int) -> TextCaptions:
        """Format ``alignment`` and build caption cues for a segment of ``duration`` ms."""
        ...

    def caption_formatted(self, formatted: FormattedAlignment) -> TextCaptions:
        """Build caption cues from an already formatted alignment."""
        ...
