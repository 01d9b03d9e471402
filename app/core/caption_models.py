"""
Data types shared by the alignment formatter and the text captioner.

Offsets are character positions (half-open ranges), times are milliseconds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


NO_NARRATION = "(no narration)"


class WordCase(str, Enum):
    ALIGNED = "aligned"
    UNALIGNED = "unaligned"
    INTERPOLATED = "interpolated"


class WordType(str, Enum):
    WORD = "word"
    NO_NARRATION = "no-narration"


@dataclass(slots=True)
class TimedText:
    """A word (or placeholder) with its transcript offsets and media timing.

    ``original_start_offset``/``original_end_offset`` remember the first offsets
    assigned, i.e. the positions in the raw transcript before paragraph cleanup
    rewrote ``offset_start``/``offset_end`` relative to the cleaned text.
    """

    text: str
    offset_start: int = 0
    offset_end: int = 0
    time_start: int = 0
    time_end: int = 0
    case: WordCase = WordCase.ALIGNED
    type: WordType = WordType.WORD
    original_start_offset: Optional[int] = None
    original_end_offset: Optional[int] = None

    def __post_init__(self) -> None:
        if self.original_start_offset is None:
            self.original_start_offset = self.offset_start
        if self.original_end_offset is None:
            self.original_end_offset = self.offset_end

    @property
    def length(self) -> int:
        return self.offset_end - self.offset_start

    @property
    def duration(self) -> int:
        return self.time_end - self.time_start


@dataclass(slots=True)
class AlignedParagraph:
    original_start_offset: int
    original_end_offset: int
    original_text: str
    text: str = ""
    words: List[TimedText] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.text:
            self.text = self.original_text

    @property
    def duration(self) -> int:
        if not self.words:
            return 0
        return self.words[-1].time_end - self.words[0].time_start

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def is_no_narration(self) -> bool:
        return self.text == NO_NARRATION


@dataclass(slots=True)
class FormattedAlignment:
    paragraphs: List[AlignedParagraph] = field(default_factory=list)

    @property
    def words(self) -> List[TimedText]:
        return [w for p in self.paragraphs for w in p.words]


@dataclass(slots=True)
class CueText:
    """One speaker's line within a caption cue. Holds its own copy of the word list."""

    speaker_id: str = ""
    words: List[TimedText] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.words = list(self.words)

    @property
    def time_start(self) -> int:
        return self.words[0].time_start if self.words else 0

    @property
    def time_end(self) -> int:
        return self.words[-1].time_end if self.words else 0

    @property
    def duration(self) -> int:
        return self.time_end - self.time_start

    @property
    def length(self) -> int:
        if not self.words:
            return 0
        return self.words[-1].offset_end - self.words[0].offset_start

    @property
    def text(self) -> str:
        return "".join(w.text for w in self.words).strip()


@dataclass(slots=True)
class CaptionCue:
    lines: List[CueText] = field(default_factory=list)

    @property
    def time_start(self) -> int:
        starts = [w.time_start for line in self.lines for w in line.words]
        return min(starts) if starts else 0

    @property
    def time_end(self) -> int:
        ends = [w.time_end for line in self.lines for w in line.words]
        return max(ends) if ends else 0

    @property
    def duration(self) -> int:
        return self.time_end - self.time_start

    @property
    def transcript_offset_start(self) -> int:
        for line in self.lines:
            if line.words:
                return line.words[0].original_start_offset
        return 0

    @property
    def transcript_offset_end(self) -> int:
        for line in reversed(self.lines):
            if line.words:
                return line.words[-1].original_end_offset
        return 0


@dataclass(slots=True)
class TextCaptions:
    cues: List[CaptionCue] = field(default_factory=list)
    validation: Optional[CaptionValidationReport] = None


@dataclass(slots=True)
class CaptionValidationReport:
    """Problem counts found by the captioner's validation pass."""

    cue_count: int = 0
    duration_too_short: int = 0
    duration_too_long: int = 0
    line_count_too_few: int = 0
    line_count_too_many: int = 0
    line_text_missing: int = 0
    line_length_too_long: int = 0

    @property
    def total(self) -> int:
        return (
            self.duration_too_short
            + self.duration_too_long
            + self.line_count_too_few
            + self.line_count_too_many
            + self.line_text_missing
            + self.line_length_too_long
        )
