from __future__ import annotations

import logging
from typing import List, Optional

from app.application.interfaces import IAlignmentFormatter
from app.core.caption_models import (
    NO_NARRATION,
    AlignedParagraph,
    FormattedAlignment,
    TimedText,
    WordCase,
    WordType,
)
from app.core.config import settings
from app.core.exceptions import AlignmentIntegrityError
from app.core.pyd_schemas import AlignmentResult, GentleCase, WordResult
from utils.alignment_utils import seconds_to_ms
from utils.text_utils import clean_caption_text

logger = logging.getLogger(__name__)

PARAGRAPH_SEPARATOR = "\n\n"


class AlignmentFormatter(IAlignmentFormatter):
    """Turns raw Gentle word timings into paragraphs of contiguous, timed words.

    Steps: repair known timing bugs, interpolate times for unaligned words,
    split the transcript into paragraphs, then clean each paragraph and
    re-anchor its words on the cleaned text.
    """

    def __init__(self, max_unaligned_trailing_words_allowed: Optional[int] = None) -> None:
        if max_unaligned_trailing_words_allowed is None:
            max_unaligned_trailing_words_allowed = settings.max_unaligned_trailing_words_allowed
        self.max_unaligned_trailing_words_allowed = max_unaligned_trailing_words_allowed

    def format_alignment(self, alignment: AlignmentResult, duration: int) -> FormattedAlignment:
        if not alignment.words:
            logger.info("No aligned words; emitting a single no-narration paragraph.")
            return self.no_narration(duration)

        words = [self.to_timed_text(w) for w in alignment.words]
        self.fix_known_data_bugs(words, duration)
        transcript = self.interpolate_unaligned_word_times(words, duration, alignment.transcript)
        if not words:
            logger.warning("Every word was truncated from the transcript; treating as no narration.")
            return self.no_narration(duration)

        paragraphs = self.generate_paragraphs(words, transcript)
        return FormattedAlignment(paragraphs=paragraphs)

    @staticmethod
    def no_narration(duration: int) -> FormattedAlignment:
        word = TimedText(
            text=NO_NARRATION,
            offset_start=0,
            offset_end=len(NO_NARRATION),
            time_start=0,
            time_end=duration,
            case=WordCase.INTERPOLATED,
            type=WordType.NO_NARRATION,
        )
        paragraph = AlignedParagraph(
            original_start_offset=0,
            original_end_offset=len(NO_NARRATION),
            original_text=NO_NARRATION,
            text=NO_NARRATION,
            words=[word],
        )
        return FormattedAlignment(paragraphs=[paragraph])

    @staticmethod
    def to_timed_text(word: WordResult) -> TimedText:
        aligned = word.case == GentleCase.success.value
        return TimedText(
            text=word.word,
            offset_start=word.start_offset,
            offset_end=word.end_offset,
            time_start=seconds_to_ms(word.start),
            time_end=seconds_to_ms(word.end),
            case=WordCase.ALIGNED if aligned else WordCase.UNALIGNED,
            type=WordType.WORD,
        )

    # ------------------------------------------------------------------
    # Data bug repair
    # ------------------------------------------------------------------
    def fix_known_data_bugs(self, words: List[TimedText], duration: int) -> None:
        """Repair non-monotonic, overlapping and out-of-range times of aligned words in place."""
        aligned = [w for w in words if w.case == WordCase.ALIGNED]

        if len(aligned) > 1:
            logger.debug("Checking for non-monotonic word times...")
            ordered = sorted(aligned, key=lambda w: w.time_start)
            snapshot = [(w.time_start, w.time_end) for w in ordered]
            for i in range(len(aligned) - 1):
                if aligned[i] is not ordered[i]:
                    aligned[i].time_start, aligned[i].time_end = snapshot[i]

            logger.debug("Checking for overlapping word times...")
            # the final adjacent pair is left alone
            for i in range(len(aligned) - 2):
                current, following = aligned[i], aligned[i + 1]
                if current.time_end > following.time_start:
                    current.time_end, following.time_start = following.time_start, current.time_end

        if aligned:
            logger.debug("Checking for illegal end times...")
            last = len(aligned) - 1
            last_good: Optional[int] = None
            for i in range(last, -1, -1):
                if aligned[i].time_end <= duration:
                    last_good = i
                    break
            if last_good is None:
                logger.warning(
                    "No aligned word ends within the duration of %sms; re-timing all %s.",
                    duration,
                    len(aligned),
                )
                self.interpolate_range(aligned, 0, duration, WordCase.ALIGNED)
            elif last_good != last:
                logger.warning(
                    "Re-timing %s aligned words ending past the duration of %sms.",
                    last - last_good,
                    duration,
                )
                self.interpolate_range(
                    aligned[last_good:],
                    min(aligned[last_good].time_start, duration),
                    duration,
                    WordCase.ALIGNED,
                )

    # ------------------------------------------------------------------
    # Interpolation
    # ------------------------------------------------------------------
    @staticmethod
    def interpolate_range(
        words: List[TimedText],
        start_time: int,
        end_time: int,
        case: WordCase = WordCase.INTERPOLATED,
    ) -> None:
        """Spread ``words`` evenly across ``[start_time, end_time]``."""
        if not words:
            return
        step = int((end_time - start_time) / len(words))
        t = start_time
        for word in words:
            word.case = case
            word.time_start = t
            word.time_end = t + step
            t = word.time_end

    def interpolate_unaligned_word_times(
        self, words: List[TimedText], duration: int, transcript: str
    ) -> str:
        """Fill in times for runs of unaligned words; returns the (possibly truncated) transcript."""
        prior_case = WordCase.ALIGNED
        start_time = 0
        run_start = 0
        last = len(words) - 1

        for i in range(len(words)):
            current_case = words[i].case

            if prior_case == WordCase.ALIGNED:
                if current_case == WordCase.ALIGNED:
                    start_time = words[i].time_end
                else:
                    run_start = i
                    if i == last:
                        self.interpolate_range(words[i : i + 1], start_time, duration)
            else:
                if current_case == WordCase.ALIGNED:
                    self.interpolate_range(words[run_start:i], start_time, words[i].time_start)
                    start_time = words[i].time_end
                elif i == last:
                    count = last - run_start + 1
                    if count > self.max_unaligned_trailing_words_allowed:
                        logger.warning(
                            "Truncating %s unaligned words from end of transcript.", count
                        )
                        transcript = transcript[: words[run_start].offset_start]
                        del words[run_start:]
                        break
                    self.interpolate_range(words[run_start:], start_time, duration)

            prior_case = current_case

        return transcript

    # ------------------------------------------------------------------
    # Paragraphs
    # ------------------------------------------------------------------
    def generate_paragraphs(self, words: List[TimedText], transcript: str) -> List[AlignedParagraph]:
        paragraphs = []
        start = 0
        for item in transcript.split(PARAGRAPH_SEPARATOR):
            end = start + len(item)
            paragraphs.append(
                AlignedParagraph(original_start_offset=start, original_end_offset=end, original_text=item)
            )
            start = end + len(PARAGRAPH_SEPARATOR)

        pointer = 0
        for paragraph in paragraphs:
            while pointer < len(words):
                word = words[pointer]
                if word.offset_start < paragraph.original_start_offset:
                    pointer += 1
                    continue
                if word.offset_end > paragraph.original_end_offset:
                    break
                paragraph.words.append(word)
                pointer += 1

        for paragraph in paragraphs:
            paragraph.text = clean_caption_text(paragraph.original_text)
            self.repair_word_offsets(paragraph)
            self.expand_word_boundaries(paragraph)

        return paragraphs

    @staticmethod
    def repair_word_offsets(paragraph: AlignedParagraph) -> None:
        """Re-anchor each word on the cleaned paragraph text by forward search."""
        prior_end = 0
        for word in paragraph.words:
            pos = paragraph.text.find(word.text, prior_end)
            if pos < 0:
                raise AlignmentIntegrityError(
                    f"No match found for '{word.text}' in paragraph text: '{paragraph.text}'",
                    word=word.text,
                    paragraph_text=paragraph.text,
                )
            word.offset_start = pos
            word.offset_end = pos + len(word.text)
            prior_end = word.offset_end

    @staticmethod
    def expand_word_boundaries(paragraph: AlignedParagraph) -> None:
        """Make word spans contiguous so they cover the whole paragraph text."""
        text = paragraph.text
        words = paragraph.words

        # leading quotes
        for word in words:
            pos = word.offset_start - 1
            if pos >= 0 and text[pos] == '"':
                word.offset_start = pos

        # hyphenated pairs
        i = 0
        while i < len(words) - 1:
            current, following = words[i], words[i + 1]
            if following.offset_start - current.offset_end == 1 and text[current.offset_end] == "-":
                current.offset_end = following.offset_end
                current.text = text[current.offset_start : current.offset_end]
                del words[i + 1]
            i += 1

        # leading punctuation belongs to the first word
        if words:
            words[0].offset_start = 0
        for i, word in enumerate(words):
            word.offset_end = words[i + 1].offset_start if i + 1 < len(words) else len(text)
            word.text = text[word.offset_start : word.offset_end]
