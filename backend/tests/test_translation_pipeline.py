import asyncio

import pytest

from conftest import png_data_url
from page_translator.constants.statuses import TranslationMode, UsageStage
from page_translator.core import AppError
from page_translator.llm.errors import LLMNonRetryableError, LLMRetryableError, StageFailureError
from page_translator.llm.prompts.instructions import NO_CORRECTIONS
from page_translator.llm.types import ExtractionResult, RawUsage
from page_translator.schemas.page import Segment, TranslationSettings

SPANISH = TranslationSettings(target_language="Spanish")
TWO_STEP = TranslationSettings(target_language="English", source_language="Spanish", mode=TranslationMode.TWO_STEP)


def _stages(outcome):
    return [r.stage for r in outcome.usage]


def test_direct_mode_success(translator, fake_client, recording_sleep):
    outcome = asyncio.run(translator.translate(png_data_url(300, 400), SPANISH))

    assert outcome.image.startswith("data:image/png;base64,")
    assert _stages(outcome) == [UsageStage.TRANSLATION]
    assert outcome.aspect_ratio == "3:4"
    assert outcome.degraded_to_direct is False
    assert outcome.extracted_segments is None
    assert "DIRECT TRANSLATION INSTRUCTIONS" in outcome.prompt_used
    assert fake_client.calls["extract"] == []
    assert fake_client.calls["redraw"][0]["aspect_ratio"] == "3:4"
    assert recording_sleep.delays == []


def test_two_step_embeds_all_segments(translator, fake_client):
    segments = [
        Segment(original="Factura", translated="Invoice", location="Header"),
        Segment(original="Fecha", translated="Date"),
        Segment(original="Total", translated="Total", location="Footer"),
    ]
    fake_client.extract_script = [
        ExtractionResult(segments=segments, usage=RawUsage(model="reasoning", input_tokens=10, output_tokens=5))
    ]

    outcome = asyncio.run(translator.translate(png_data_url(400, 300), TWO_STEP))

    instructions = fake_client.calls["redraw"][0]["instructions"]
    for s in segments:
        assert f'"{s.original}" => "{s.translated}"' in instructions
    assert outcome.extracted_segments
    assert len(outcome.extracted_segments.splitlines()) == 3
    assert _stages(outcome) == [UsageStage.EXTRACTION, UsageStage.TRANSLATION]
    assert outcome.segments == segments
    assert outcome.aspect_ratio == "4:3"


def test_two_step_with_no_segments_falls_back_to_direct(translator, fake_client):
    fake_client.extract_script = [
        ExtractionResult(segments=[], usage=RawUsage(model="reasoning", input_tokens=10, output_tokens=1))
    ]

    outcome = asyncio.run(translator.translate(png_data_url(100, 100), TWO_STEP))

    assert outcome.degraded_to_direct is True
    assert NO_CORRECTIONS in outcome.prompt_used
    assert "DIRECT TRANSLATION INSTRUCTIONS" in outcome.prompt_used
    # The extraction call was still paid for
    assert _stages(outcome) == [UsageStage.EXTRACTION, UsageStage.TRANSLATION]


def test_two_step_with_failing_extraction_falls_back_to_direct(translator, fake_client, recording_sleep):
    fake_client.extract_script = [LLMRetryableError("503 unavailable")] * 3

    outcome = asyncio.run(translator.translate(png_data_url(100, 100), TWO_STEP))

    assert len(fake_client.calls["extract"]) == 3
    assert outcome.degraded_to_direct is True
    assert NO_CORRECTIONS in outcome.prompt_used
    assert _stages(outcome) == [UsageStage.TRANSLATION]
    assert recording_sleep.delays == [10.0, 10.0]


def test_malformed_extraction_falls_back_to_direct(translator, fake_client):
    fake_client.extract_script = [
        ExtractionResult(segments=[], usage=RawUsage(model="reasoning", input_tokens=3), malformed=True)
    ]
    outcome = asyncio.run(translator.translate(png_data_url(100, 100), TWO_STEP))
    assert outcome.degraded_to_direct is True


def test_redraw_recovers_after_two_rate_limits(translator, fake_client, recording_sleep):
    fake_client.redraw_script = [LLMRetryableError("429 rate limit"), LLMRetryableError("429 rate limit")]

    outcome = asyncio.run(translator.translate(png_data_url(300, 400), SPANISH))

    assert len(fake_client.calls["redraw"]) == 3
    assert sum(recording_sleep.delays) == pytest.approx(20.0)
    assert _stages(outcome) == [UsageStage.TRANSLATION]
    assert outcome.image.startswith("data:image/png;base64,")


def test_redraw_exhaustion_raises_stage_failure_with_last_message(translator, fake_client):
    fake_client.redraw_script = [
        LLMRetryableError("429 first"),
        LLMRetryableError("429 second"),
        LLMRetryableError("429 third"),
    ]

    with pytest.raises(StageFailureError) as exc:
        asyncio.run(translator.translate(png_data_url(300, 400), SPANISH))

    assert exc.value.stage == "translation"
    assert str(exc.value) == "429 third"
    assert len(fake_client.calls["redraw"]) == 3


def test_non_retryable_redraw_error_is_not_retried(translator, fake_client, recording_sleep):
    fake_client.redraw_script = [LLMNonRetryableError("No image data returned from Gemini.")]

    with pytest.raises(StageFailureError):
        asyncio.run(translator.translate(png_data_url(300, 400), SPANISH))

    assert len(fake_client.calls["redraw"]) == 1
    assert recording_sleep.delays == []


def test_unreadable_source_image_is_rejected_before_any_call(translator, fake_client):
    with pytest.raises(AppError):
        asyncio.run(translator.translate("data:image/png;base64,bm90IGFuIGltYWdl", SPANISH))
    assert fake_client.calls["redraw"] == []
