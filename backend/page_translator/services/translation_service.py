# page_translator/services/translation_service.py
"""
translation_service.py
- Purpose: Turn one source page image into a translated page image.
- Owns: aspect-ratio snapping, the optional extraction phase, instruction composition,
  the redraw call, and per-stage usage records.
- Design: extraction problems degrade to direct mode; redraw problems raise
  StageFailureError for the lifecycle controller to record on the page.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from page_translator.constants.statuses import TranslationMode, UsageStage
from page_translator.images import image_dimensions, parse_data_url, snap_aspect_ratio
from page_translator.llm.errors import LLMError, StageFailureError
from page_translator.llm.prompts.instructions import (
    InstructionContext,
    build_redraw_instructions,
    render_mapping,
)
from page_translator.llm.retry import RetryPolicy, Sleep, with_retry
from page_translator.llm.types import ExtractionResult, ImagePart, RedrawResult
from page_translator.schemas.page import Segment, TranslationSettings
from page_translator.usage.cost import UsageAccountant
from page_translator.usage.models import UsageRecord

logger = logging.getLogger("page_translator.translation")


class RemoteClient(Protocol):
    def is_configured(self) -> bool: ...

    async def extract(
        self,
        image: ImagePart,
        *,
        source_language: str,
        target_language: str,
        glossary: str | None = None,
        feedback: str | None = None,
    ) -> ExtractionResult: ...

    async def redraw(self, image: ImagePart, *, instructions: str, aspect_ratio: str) -> RedrawResult: ...


@dataclass(frozen=True)
class TranslationOutcome:
    image: str
    usage: list[UsageRecord]
    prompt_used: str
    aspect_ratio: str
    segments: list[Segment] = field(default_factory=list)
    extracted_segments: str | None = None
    degraded_to_direct: bool = False


def extraction_usable(result: ExtractionResult | None) -> bool:
    """The one test for "extraction failed": no result, or no segments."""
    return result is not None and len(result.segments) > 0


class TranslationPipeline:
    def __init__(
        self,
        client: RemoteClient,
        accountant: UsageAccountant,
        *,
        retry_policy: RetryPolicy = RetryPolicy(),
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.accountant = accountant
        self.retry_policy = retry_policy
        self.sleep = sleep

    async def _extract(
        self,
        image: ImagePart,
        config: TranslationSettings,
        feedback: str | None,
    ) -> ExtractionResult | None:
        try:
            return await with_retry(
                lambda: self.client.extract(
                    image,
                    source_language=config.source_language,
                    target_language=config.target_language,
                    glossary=config.glossary,
                    feedback=feedback,
                ),
                policy=self.retry_policy,
                sleep=self.sleep,
                label="extraction",
            )
        except LLMError as e:
            logger.warning(
                "translation.extraction_failed",
                extra={"error_type": type(e).__name__, "error": str(e)},
            )
            return None

    async def translate(
        self,
        source_image: str,
        config: TranslationSettings,
        *,
        feedback: str | None = None,
    ) -> TranslationOutcome:
        image = parse_data_url(source_image)
        width, height = image_dimensions(image)
        aspect_ratio = snap_aspect_ratio(width, height)

        records: list[UsageRecord] = []
        segments: list[Segment] = []
        mapping = ""
        mode = config.mode
        degraded = False

        if config.mode == TranslationMode.TWO_STEP:
            extraction = await self._extract(image, config, feedback)
            if extraction is not None:
                records.append(self.accountant.record(extraction.usage, UsageStage.EXTRACTION))

            if extraction_usable(extraction):
                segments = list(extraction.segments)
                mapping = render_mapping(segments)
            else:
                mode = TranslationMode.DIRECT
                degraded = True
                logger.warning(
                    "translation.extraction_degraded",
                    extra={
                        "reason": "error" if extraction is None else ("malformed" if extraction.malformed else "empty"),
                    },
                )

        instructions = build_redraw_instructions(
            mode,
            InstructionContext(
                target_language=config.target_language,
                glossary=config.glossary,
                feedback=feedback,
                mapping=mapping,
                degraded=degraded,
            ),
        )

        try:
            redraw = await with_retry(
                lambda: self.client.redraw(image, instructions=instructions, aspect_ratio=aspect_ratio),
                policy=self.retry_policy,
                sleep=self.sleep,
                label="translation",
            )
        except LLMError as e:
            raise StageFailureError(UsageStage.TRANSLATION.value, str(e)) from e

        records.append(self.accountant.record(redraw.usage, UsageStage.TRANSLATION))

        logger.info(
            "translation.done",
            extra={
                "mode": config.mode.value,
                "effective_mode": mode.value,
                "aspect_ratio": aspect_ratio,
                "segments": len(segments),
            },
        )
        return TranslationOutcome(
            image=redraw.image,
            usage=records,
            prompt_used=instructions,
            aspect_ratio=aspect_ratio,
            segments=segments,
            extracted_segments=mapping or None,
            degraded_to_direct=degraded,
        )
