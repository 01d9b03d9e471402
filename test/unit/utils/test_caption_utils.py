from app.core.caption_models import CaptionCue, CueText, TextCaptions, TimedText
from utils.caption_utils import (
    escape_vtt,
    format_caption_time,
    to_plain_text,
    to_tsync,
    to_vtt,
)


def _line(speaker: str, text: str, start: int, end: int, offset: int = 0) -> CueText:
    word = TimedText(
        text=text,
        offset_start=offset,
        offset_end=offset + len(text),
        time_start=start,
        time_end=end,
    )
    return CueText(speaker, [word])


def _captions() -> TextCaptions:
    return TextCaptions(
        cues=[
            CaptionCue(lines=[_line("S1", "Where were you born?", 0, 2500, 0)]),
            CaptionCue(
                lines=[
                    _line("S2", "In Chicago <the South Side>.", 2600, 5000, 22),
                    _line("S1", "And then?", 5000, 6200, 52),
                ]
            ),
        ]
    )


def test_format_caption_time():
    assert format_caption_time(0) == "00:00.000"
    assert format_caption_time(61234) == "01:01.234"
    assert format_caption_time(3_600_000) == "60:00.000"
    assert format_caption_time(-5) == "00:00.000"


def test_escape_vtt():
    assert escape_vtt("a<b>&c") == "a&lt;b&gt;&amp;c"


def test_to_vtt_renders_voice_spans_and_note():
    vtt = to_vtt(_captions(), note="test run")

    assert vtt.startswith("WEBVTT\n\nNOTE test run\n\n00:00.000 --> 00:02.500\n")
    assert "<v S1>Where were you born?" in vtt
    assert "00:02.600 --> 00:06.200" in vtt
    assert "<v S2>In Chicago &lt;the South Side&gt;." in vtt
    assert vtt.endswith("<v S1>And then?\n")


def test_to_vtt_without_speaker_or_note():
    captions = TextCaptions(cues=[CaptionCue(lines=[_line("", "(no narration)", 0, 5000)])])
    assert to_vtt(captions) == "WEBVTT\n\n00:00.000 --> 00:05.000\n(no narration)\n"


def test_to_tsync_pairs_start_and_end():
    pairs = to_tsync(_captions(), end_offset=61, end_time=7000)

    assert [(p.offset, p.time_ms) for p in pairs] == [(0, 0), (0, 0), (22, 2600), (61, 7000)]


def test_to_plain_text_dump():
    dump = to_plain_text(_captions())
    lines = dump.splitlines()

    assert lines[0] == "DIAGNOSTIC DUMP"
    assert lines[1] == "cue[0] - Duration: 2500ms - 00:00.000 --> 00:02.500"
    assert lines[2] == "  line[0]: S1:Where were you born?"
    assert lines[4] == "  line[0]: S2:In Chicago <the South Side>."
    assert lines[5] == "  line[1]: S1:And then?"
