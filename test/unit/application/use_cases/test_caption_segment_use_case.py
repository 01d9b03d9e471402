import pytest

from app.application.use_cases.caption_segment import CaptionSegmentUseCase
from app.application.use_cases.outcomes import OutcomeStatus
from app.infrastructure.adapters.bundles.captions import get_caption_adapter_bundle

TRANSCRIPT = "Where were you born?\n\nIn Chicago, on the South Side."
TIMINGS = [
    ("Where", 0.0, 0.4), ("were", 0.5, 0.8), ("you", 0.9, 1.1), ("born", 1.2, 1.8),
    ("In", 2.5, 2.7), ("Chicago", 2.8, 3.4), ("on", 3.5, 3.7), ("the", 3.8, 3.9),
    ("South", 4.0, 4.4), ("Side", 4.5, 5.0),
]


class TestCaptionSegmentUseCase:
    def setup_method(self):
        self.use_case = CaptionSegmentUseCase(get_caption_adapter_bundle(with_aligner=False))

    @pytest.mark.asyncio
    async def test_supplied_alignment_is_captioned(self, alignment_factory):
        outcome = await self.use_case.execute(
            duration_ms=6000, alignment=alignment_factory(TRANSCRIPT, TIMINGS)
        )

        assert outcome.ok
        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.run_id
        assert len(outcome.captions.cues) == 2
        assert outcome.validation.total == 0
        assert outcome.vtt.startswith("WEBVTT")
        assert outcome.tsync[-1].offset == len(TRANSCRIPT)
        assert outcome.caption_dump.startswith("DIAGNOSTIC DUMP")

    @pytest.mark.asyncio
    async def test_alignment_json_payload_is_accepted(self, alignment_factory):
        payload = alignment_factory(TRANSCRIPT, TIMINGS).model_dump(by_alias=True)

        outcome = await self.use_case.execute(duration_ms=6000, alignment=payload)

        assert outcome.ok

    @pytest.mark.asyncio
    async def test_segment_without_words_gets_no_narration_cue(self):
        outcome = await self.use_case.execute(
            duration_ms=4000, alignment={"transcript": "", "words": []}
        )

        assert outcome.ok
        assert outcome.captions.cues[0].lines[0].text == "(no narration)"
        assert "00:00.000 --> 00:04.000" in outcome.vtt

    @pytest.mark.asyncio
    async def test_missing_aligner_fails_the_segment(self):
        outcome = await self.use_case.execute(
            duration_ms=1000, transcript="Hello there.", audio_path="missing.wav"
        )

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error_code == "CONFIGURATION_ERROR"
        assert outcome.captions is None
        assert outcome.validation is None

    @pytest.mark.asyncio
    async def test_integrity_error_fails_the_segment(self, alignment_factory):
        alignment = alignment_factory("Hello [world]", [("Hello", 0.0, 0.5), ("world", 0.6, 1.0)])

        outcome = await self.use_case.execute(duration_ms=2000, alignment=alignment)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error_code == "ALIGNMENT_INTEGRITY_ERROR"
        assert "world" in outcome.error

    @pytest.mark.asyncio
    async def test_unexpected_step_error_is_reported_as_pipeline_error(self, alignment_factory):
        outcome = await self.use_case.execute(
            duration_ms=-5, alignment=alignment_factory(TRANSCRIPT, TIMINGS)
        )

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error_code == "PIPELINE_ERROR"
        assert "format_alignment" in outcome.error
