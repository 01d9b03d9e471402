"""
Helpers for judging and choosing between Gentle alignment passes.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.pyd_schemas import AlignmentResult, GentleCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentStats:
    unaligned: int = 0
    max_consecutive_unaligned: int = 0


def seconds_to_ms(seconds: float) -> int:
    """Convert Gentle seconds to integer milliseconds (rounded, not truncated)."""
    return int(round(seconds * 1000))


def analyze_alignment(result: Optional[AlignmentResult]) -> AlignmentStats:
    """Count unaligned words and the longest run of consecutive unaligned words.

    Words Gentle did not find in the transcript are disfluencies and are ignored.
    Unknown cases are logged and counted as aligned.
    """
    if result is None or not result.words:
        return AlignmentStats()

    unaligned = 0
    consecutive = 0
    max_consecutive = 0
    for word in result.words:
        if word.case == GentleCase.success.value:
            consecutive = 0
        elif word.case == GentleCase.not_found_in_audio.value:
            unaligned += 1
            consecutive += 1
            max_consecutive = max(max_consecutive, consecutive)
        elif word.case == GentleCase.not_found_in_transcript.value:
            logger.warning("Ignoring disfluency in alignment data: %s", word.word)
        else:
            logger.warning("Unknown alignment case '%s' for word '%s'", word.case, word.word)
            consecutive = 0

    return AlignmentStats(unaligned=unaligned, max_consecutive_unaligned=max_consecutive)


def choose_best_alignment(
    default: AlignmentResult, conservative: Optional[AlignmentResult]
) -> AlignmentResult:
    """Pick the better of a default and a conservative Gentle pass.

    Fewer unaligned words wins; on a tie the shorter worst run wins; a full tie
    keeps the default pass.
    """
    if conservative is None:
        return default

    first = analyze_alignment(default)
    second = analyze_alignment(conservative)
    logger.info(
        "Default pass: %s unaligned (max run %s); conservative pass: %s unaligned (max run %s)",
        first.unaligned,
        first.max_consecutive_unaligned,
        second.unaligned,
        second.max_consecutive_unaligned,
    )

    if first.unaligned == second.unaligned:
        if first.max_consecutive_unaligned <= second.max_consecutive_unaligned:
            return default
        logger.info("Results from conservative pass selected.")
        return conservative

    if first.unaligned < second.unaligned:
        return default
    logger.info("Results from conservative pass selected.")
    return conservative
