from __future__ import annotations

from typing import Protocol

from app.core.pyd_schemas import AlignmentResult


class ITranscriptionAligner(Protocol):
    """Aligns an audio file with its transcript text and returns the Gentle style word timings."""

    def align(self, audio_path: str, transcript_text: str) -> AlignmentResult:
        """Return the alignment (transcript plus ordered words).

        Raises AlignmentServiceError when the service cannot produce one.
        """
        ...
