"""Unit tests for the caption pipeline steps."""

import logging

import pytest

from app.application.pipeline.base import PipelineContext, StepStatus
from app.application.pipeline.captions.steps.align_transcript import AlignTranscriptStep
from app.application.pipeline.captions.steps.export_captions import ExportCaptionsStep
from app.application.pipeline.captions.steps.format_alignment import FormatAlignmentStep
from app.application.pipeline.captions.steps.generate_captions import GenerateCaptionsStep
from app.core.caption_models import CaptionValidationReport, FormattedAlignment, TextCaptions
from app.core.exceptions import AlignmentServiceError, ConfigurationError
from app.core.pyd_schemas import AlignmentResult
from app.infrastructure.adapters import AlignmentFormatter, CaptioningOptions, TextCaptioner

TRANSCRIPT = "Where were you born?\n\nIn Chicago, on the South Side."
TIMINGS = [
    ("Where", 0.0, 0.4), ("were", 0.5, 0.8), ("you", 0.9, 1.1), ("born", 1.2, 1.8),
    ("In", 2.5, 2.7), ("Chicago", 2.8, 3.4), ("on", 3.5, 3.7), ("the", 3.8, 3.9),
    ("South", 4.0, 4.4), ("Side", 4.5, 5.0),
]


class _FlakyAligner:
    def __init__(self, result, failures=1):
        self.result = result
        self.failures = failures
        self.calls = 0

    def align(self, audio_path, transcript_text):
        self.calls += 1
        if self.calls <= self.failures:
            raise AlignmentServiceError("Gentle busy")
        return self.result


@pytest.fixture
def audio_file(tmp_path):
    p = tmp_path / "segment.wav"
    p.write_bytes(b"RIFF0000WAVE")
    return str(p)


class TestAlignTranscriptStep:
    @pytest.mark.asyncio
    async def test_supplied_alignment_dict_skips_aligner(self, alignment_factory):
        payload = alignment_factory(TRANSCRIPT, TIMINGS).model_dump(by_alias=True)
        step = AlignTranscriptStep(aligner=None)
        ctx = PipelineContext(input={"alignment": payload})

        await step(ctx)

        assert step.status == StepStatus.SKIPPED
        assert isinstance(ctx.get("alignment"), AlignmentResult)
        assert ctx.get("alignment").transcript == TRANSCRIPT

    @pytest.mark.asyncio
    async def test_no_aligner_and_no_alignment_is_configuration_error(self):
        step = AlignTranscriptStep(aligner=None)
        ctx = PipelineContext(input={"transcript": TRANSCRIPT, "audio_path": "a.wav"})

        with pytest.raises(ConfigurationError):
            await step.run(ctx)

    @pytest.mark.asyncio
    async def test_missing_audio_file(self, tmp_path):
        step = AlignTranscriptStep(_FlakyAligner(None, failures=0))
        ctx = PipelineContext(
            input={"transcript": TRANSCRIPT, "audio_path": str(tmp_path / "missing.wav")}
        )

        with pytest.raises(AlignmentServiceError):
            await step.run(ctx)

    @pytest.mark.asyncio
    async def test_empty_transcript_rejected(self, audio_file):
        step = AlignTranscriptStep(_FlakyAligner(None, failures=0))
        ctx = PipelineContext(input={"transcript": "  ", "audio_path": audio_file})

        with pytest.raises(ValueError):
            await step.run(ctx)

    @pytest.mark.asyncio
    async def test_service_error_is_retried(self, alignment_factory, audio_file):
        alignment = alignment_factory(TRANSCRIPT, TIMINGS)
        aligner = _FlakyAligner(alignment, failures=1)
        step = AlignTranscriptStep(aligner, retries=1, retry_backoff=0.0)
        step.jitter = 0.0
        ctx = PipelineContext(input={"transcript": TRANSCRIPT, "audio_path": audio_file})

        await step(ctx)

        assert step.attempts == 2
        assert ctx.get("alignment") is alignment

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, audio_file):
        step = AlignTranscriptStep(_FlakyAligner(None, failures=0), retries=3, retry_backoff=0.0)
        ctx = PipelineContext(input={"transcript": "", "audio_path": audio_file})

        with pytest.raises(ValueError):
            await step(ctx)
        assert step.attempts == 1


class TestFormatAlignmentStep:
    def setup_method(self):
        self.step = FormatAlignmentStep(AlignmentFormatter(10))

    @pytest.mark.asyncio
    async def test_formats_alignment_from_artifacts(self, alignment_factory):
        ctx = PipelineContext(input={"duration_ms": 6000})
        ctx.set("alignment", alignment_factory(TRANSCRIPT, TIMINGS))

        await self.step(ctx)

        formatted = ctx.get("formatted")
        assert isinstance(formatted, FormattedAlignment)
        assert [p.text for p in formatted.paragraphs] == [
            "Where were you born?",
            "In Chicago, on the South Side.",
        ]

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, alignment_factory):
        ctx = PipelineContext(input={"duration_ms": -1})
        ctx.set("alignment", alignment_factory(TRANSCRIPT, TIMINGS))

        with pytest.raises(ValueError):
            await self.step.run(ctx)


class TestGenerateAndExportSteps:
    @pytest.mark.asyncio
    async def test_generate_then_export(self, alignment_factory):
        alignment = alignment_factory(TRANSCRIPT, TIMINGS)
        formatter = AlignmentFormatter(10)
        ctx = PipelineContext(input={"duration_ms": 6000})
        ctx.set("alignment", alignment)
        ctx.set("formatted", formatter.format_alignment(alignment, 6000))

        await GenerateCaptionsStep(TextCaptioner(CaptioningOptions(), formatter))(ctx)
        await ExportCaptionsStep(note="unit test")(ctx)

        captions = ctx.get("captions")
        assert isinstance(captions, TextCaptions)
        assert ctx.get("caption_validation") is captions.validation
        assert ctx.get("vtt").startswith("WEBVTT\n\nNOTE unit test\n\n")
        assert "<v S1>Where were you born?" in ctx.get("vtt")
        tsync = ctx.get("tsync")
        assert (tsync[0].offset, tsync[0].time_ms) == (0, 0)
        assert (tsync[-1].offset, tsync[-1].time_ms) == (len(TRANSCRIPT), 6000)
        assert ctx.get("caption_dump").startswith("DIAGNOSTIC DUMP")

    @pytest.mark.asyncio
    async def test_generate_warns_on_validation_problems(self, caplog):
        caplog.set_level(logging.WARNING)

        class _Captioner:
            def caption_formatted(self, formatted):
                return TextCaptions(cues=[], validation=CaptionValidationReport(duration_too_short=2))

        ctx = PipelineContext(input={})
        ctx.set("formatted", FormattedAlignment())

        await GenerateCaptionsStep(_Captioner())(ctx)

        assert "2 cue(s) outside the configured bounds" in caplog.text

    @pytest.mark.asyncio
    async def test_export_requires_captions(self):
        ctx = PipelineContext(input={"duration_ms": 1000})

        with pytest.raises(KeyError):
            await ExportCaptionsStep()(ctx)
