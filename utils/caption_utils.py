"""
Serialisers for generated captions: WebVTT, transcript/time sync pairs and a
plain text diagnostic dump.
"""

from typing import List

from app.core.caption_models import TextCaptions
from app.core.pyd_schemas import TSyncPair


def format_caption_time(ms: int) -> str:
    """Format milliseconds as ``MM:SS.sss`` (minutes are not wrapped into hours)."""
    ms = max(0, int(ms))
    minutes, rem = divmod(ms, 60_000)
    seconds = rem / 1000.0
    return f"{minutes:02d}:{seconds:06.3f}"


def escape_vtt(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def to_vtt(captions: TextCaptions, note: str = "") -> str:
    """Render captions as a WebVTT document with ``<v speaker>`` voice spans."""
    parts = ["WEBVTT"]
    if note:
        parts.append(f"\n\nNOTE {note}")
    for cue in captions.cues:
        parts.append(
            f"\n\n{format_caption_time(cue.time_start)} --> {format_caption_time(cue.time_end)}"
        )
        for line in cue.lines:
            if line.speaker_id:
                parts.append(f"\n<v {line.speaker_id}>{escape_vtt(line.text)}")
            else:
                parts.append(f"\n{escape_vtt(line.text)}")
    parts.append("\n")
    return "".join(parts)


def to_tsync(captions: TextCaptions, end_offset: int, end_time: int) -> List[TSyncPair]:
    """Offset/time sync points: origin, one per cue start, then the segment end."""
    pairs = [TSyncPair(offset=0, time_ms=0)]
    for cue in captions.cues:
        pairs.append(TSyncPair(offset=cue.transcript_offset_start, time_ms=cue.time_start))
    pairs.append(TSyncPair(offset=end_offset, time_ms=end_time))
    return pairs


def to_plain_text(captions: TextCaptions) -> str:
    """Human readable dump of every cue and line, for troubleshooting."""
    lines = ["DIAGNOSTIC DUMP"]
    for i, cue in enumerate(captions.cues):
        lines.append(
            f"cue[{i}] - Duration: {cue.duration}ms - "
            f"{format_caption_time(cue.time_start)} --> {format_caption_time(cue.time_end)}"
        )
        for j, line in enumerate(cue.lines):
            lines.append(f"  line[{j}]: {line.speaker_id}:{line.text}")
    return "\n".join(lines) + "\n"
