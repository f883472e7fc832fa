"""
api.py (schemas)
- Purpose: Request/response DTOs for the HTTP surface.
- Design: page listings leave out image payloads; images have their own routes.
"""

from pydantic import BaseModel, Field

from page_translator.constants.statuses import PageStatus, ProcessingStatus
from page_translator.schemas.evaluation import EvaluationResult
from page_translator.schemas.page import PageRecord, TranslationSettings
from page_translator.usage.models import UsageTotals


class StartTranslationRequest(TranslationSettings):
    page_numbers: list[int] | None = None

    def settings(self) -> TranslationSettings:
        return TranslationSettings(
            target_language=self.target_language,
            source_language=self.source_language,
            mode=self.mode,
            glossary=self.glossary,
        )


class RetryPageRequest(BaseModel):
    feedback: str | None = Field(default=None, max_length=4000)


class AcceptedResponse(BaseModel):
    accepted: bool = True
    operation: str


class PageSummary(BaseModel):
    page_number: int
    status: PageStatus
    error_message: str | None = None
    has_translation: bool
    is_evaluating: bool
    evaluation: EvaluationResult | None = None
    usage_total: UsageTotals | None = None
    extracted_segments: str | None = None
    prompt_used: str | None = None

    @classmethod
    def from_page(cls, page: PageRecord) -> "PageSummary":
        return cls(
            page_number=page.page_number,
            status=page.status,
            error_message=page.error_message,
            has_translation=page.translated_image is not None,
            is_evaluating=page.is_evaluating,
            evaluation=page.evaluation,
            usage_total=page.usage.total if page.usage else None,
            extracted_segments=page.extracted_segments,
            prompt_used=page.prompt_used,
        )


class PageListResponse(BaseModel):
    processing_status: ProcessingStatus
    settings: TranslationSettings | None
    pages: list[PageSummary]
