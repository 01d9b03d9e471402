from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GentleCase(str, Enum):
    success = "success"
    not_found_in_audio = "not-found-in-audio"
    not_found_in_transcript = "not-found-in-transcript"


class WordResult(BaseModel):
    """One word of a Gentle alignment. Times are seconds, offsets are characters."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    case: str = GentleCase.success.value
    word: str = ""
    aligned_word: Optional[str] = Field(default=None, alias="alignedWord")
    start_offset: int = Field(default=0, alias="startOffset")
    end_offset: int = Field(default=0, alias="endOffset")
    start: float = 0.0
    end: float = 0.0


class AlignmentResult(BaseModel):
    """Gentle JSON alignment output (``transcript`` plus ordered ``words``)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    transcript: str = ""
    words: Optional[List[WordResult]] = None


class TSyncPair(BaseModel):
    """Transcript offset to media time synchronisation point."""

    offset: int
    time_ms: int
