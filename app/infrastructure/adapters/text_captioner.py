from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from app.application.interfaces import IAlignmentFormatter, ITextCaptioner
from app.core.caption_models import (
    CaptionCue,
    CaptionValidationReport,
    CueText,
    FormattedAlignment,
    TextCaptions,
)
from app.core.config import Settings, settings as default_settings
from app.core.pyd_schemas import AlignmentResult
from app.infrastructure.adapters.alignment_formatter import AlignmentFormatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptioningOptions:
    speaker1_to_speaker2_char_ratio: float = 1.5
    max_cue_length: int = 80
    target_length: int = 60
    min_cue_duration: int = 1500
    max_cue_duration: int = 7000
    target_duration: int = 5000
    max_cue_line_count: int = 2

    @classmethod
    def from_settings(cls, s: Settings) -> "CaptioningOptions":
        return cls(
            speaker1_to_speaker2_char_ratio=s.caption_speaker1_to_speaker2_char_ratio,
            max_cue_length=s.caption_max_cue_length,
            target_length=s.caption_target_length,
            min_cue_duration=s.caption_min_cue_duration,
            max_cue_duration=s.caption_max_cue_duration,
            target_duration=s.caption_target_duration,
            max_cue_line_count=s.caption_max_cue_line_count,
        )


class TextCaptioner(ITextCaptioner):
    """Builds broadcast style caption cues from a formatted alignment.

    Three passes: generate one cue per paragraph line, merge cues that are too
    short into a neighbour, then validate and report what is still off.
    """

    def __init__(
        self,
        options: Optional[CaptioningOptions] = None,
        formatter: Optional[IAlignmentFormatter] = None,
    ) -> None:
        self.options = options or CaptioningOptions.from_settings(default_settings)
        self.formatter = formatter or AlignmentFormatter()

    def caption_text(self, alignment: AlignmentResult, duration: int) -> TextCaptions:
        formatted = self.formatter.format_alignment(alignment, duration)
        return self.caption_formatted(formatted)

    def caption_formatted(self, formatted: FormattedAlignment) -> TextCaptions:
        logger.info("Captioner: Initial Pass ...")
        cues = self.generate_cues(formatted)

        logger.info("Captioner: Combining Pass ...")
        self.coalescing_pass(cues)

        logger.info("Captioner: Validation Pass ...")
        report = self.validation_pass(cues)

        return TextCaptions(cues=cues, validation=report)

    def determine_speaker_order(self, formatted: FormattedAlignment) -> Tuple[str, str]:
        """Guess whether the interviewer (S1) or the subject (S2) speaks first.

        Even-indexed paragraphs belong to the first speaker. The interviewer is
        assumed to say less, so a low first/second character ratio means S1 first.
        """
        counts = [0, 0]
        for i, paragraph in enumerate(formatted.paragraphs):
            counts[i % 2] += len(paragraph.text)

        ratio = 0.0 if counts[1] == 0 else counts[0] / counts[1]
        if ratio < self.options.speaker1_to_speaker2_char_ratio:
            return ("S1", "S2")
        return ("S2", "S1")

    def generate_cues(self, formatted: FormattedAlignment) -> List[CaptionCue]:
        opts = self.options
        speakers = self.determine_speaker_order(formatted)
        lines: List[CueText] = []

        for i, paragraph in enumerate(formatted.paragraphs):
            if paragraph.is_no_narration:
                lines.append(CueText("", paragraph.words))
            elif paragraph.duration > opts.max_cue_duration or paragraph.length > opts.max_cue_length:
                lines.extend(self.split_paragraph(speakers[i % 2], CueText(speakers[i % 2], paragraph.words)))
            else:
                lines.append(CueText(speakers[i % 2], paragraph.words))

        return [CaptionCue(lines=[line]) for line in lines]

    def split_paragraph(self, speaker_id: str, remaining: CueText) -> List[CueText]:
        """Greedily cut an oversized paragraph into lines near the target length/duration."""
        opts = self.options
        lines = []
        line = CueText(speaker_id)
        while remaining.words:
            line.words.append(remaining.words.pop(0))

            if (
                line.length >= opts.target_length
                or line.duration >= opts.target_duration
                or not remaining.words
            ):
                if (
                    remaining.words
                    and remaining.duration < opts.min_cue_duration
                    and remaining.duration + line.duration < opts.max_cue_duration
                ):
                    line.words.extend(remaining.words)
                    remaining.words.clear()

                lines.append(line)
                line = CueText(speaker_id)
        return lines

    def coalescing_pass(self, cues: List[CaptionCue]) -> None:
        """Merge cues shorter than the minimum duration into an eligible neighbour."""
        opts = self.options
        i = 0
        while i < len(cues):
            cue = cues[i]
            if cue.duration < opts.min_cue_duration:
                prev_cue = cues[i - 1] if i > 0 else None
                next_cue = cues[i + 1] if i < len(cues) - 1 else None

                prev_ok = (
                    prev_cue is not None
                    and prev_cue.duration + cue.duration < opts.max_cue_duration
                    and len(prev_cue.lines) < opts.max_cue_line_count
                )
                next_ok = (
                    next_cue is not None
                    and next_cue.duration + cue.duration < opts.max_cue_duration
                    and len(next_cue.lines) < opts.max_cue_line_count
                )

                if prev_ok and next_ok:
                    # shorter neighbour, previous on a tie
                    next_ok = prev_cue.duration > next_cue.duration
                    prev_ok = not next_ok

                if prev_ok:
                    logger.debug("CoalescingPass: cue[%s] combining with prev cue.", i)
                    self.combine_cues(prev_cue, cue)
                    del cues[i]
                    i -= 1
                elif next_ok:
                    logger.debug("CoalescingPass: cue[%s] combining with next cue.", i)
                    self.combine_cues(cue, next_cue)
                    del cues[i + 1]
                else:
                    logger.warning(
                        "CoalescingPass: cue[%s] too short but no suitable neighbors for combining.", i
                    )
            i += 1

    @staticmethod
    def combine_cues(target: CaptionCue, source: CaptionCue) -> None:
        """Append ``source`` lines to ``target`` and fuse consecutive lines of one speaker."""
        target.lines.extend(source.lines)

        i = 0
        while i < len(target.lines) - 1:
            current, following = target.lines[i], target.lines[i + 1]
            if current.speaker_id == following.speaker_id:
                current.words.extend(following.words)
                del target.lines[i + 1]
            else:
                i += 1

    def validation_pass(self, cues: List[CaptionCue]) -> CaptionValidationReport:
        opts = self.options
        report = CaptionValidationReport(cue_count=len(cues))
        logger.info("Validating %s cues...", len(cues))

        for i, cue in enumerate(cues):
            if cue.duration < opts.min_cue_duration:
                report.duration_too_short += 1
                logger.warning(
                    "cue[%s]: duration %sms less than allowed minimum %sms.",
                    i, cue.duration, opts.min_cue_duration,
                )
            if cue.duration > opts.max_cue_duration:
                report.duration_too_long += 1
                logger.warning(
                    "cue[%s]: duration %sms greater than allowed maximum %sms.",
                    i, cue.duration, opts.max_cue_duration,
                )
            if len(cue.lines) < 1:
                report.line_count_too_few += 1
                logger.warning("cue[%s]: line count of %s less than allowed minimum of 1.", i, len(cue.lines))
            if len(cue.lines) > opts.max_cue_line_count:
                report.line_count_too_many += 1
                logger.warning(
                    "cue[%s]: line count of %s greater than allowed maximum %s.",
                    i, len(cue.lines), opts.max_cue_line_count,
                )
            for j, line in enumerate(cue.lines):
                if line.length == 0:
                    report.line_text_missing += 1
                    logger.warning("  line[%s]: has no text.", j)
                if line.length > opts.max_cue_length:
                    report.line_length_too_long += 1
                    logger.warning(
                        "  line[%s]: length %s chars greater than allowed maximum %s chars.",
                        j, line.length, opts.max_cue_length,
                    )

        logger.info("Validation complete: %s problems detected.", report.total)
        for label, count in (
            ("cues too short", report.duration_too_short),
            ("cues too long", report.duration_too_long),
            ("cues with too few lines", report.line_count_too_few),
            ("cues with too many lines", report.line_count_too_many),
            ("lines missing text", report.line_text_missing),
            ("lines too long", report.line_length_too_long),
        ):
            if count:
                logger.info("  %s %s.", count, label)
        return report
