"""
page.py (schemas)
- Purpose: Page records and the translation settings a batch runs with.
- Design: PageRecord is patched by key (page_number) through the page store; fields
  are never edited in place.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from page_translator.constants.statuses import PageStatus, TranslationMode
from page_translator.schemas.evaluation import EvaluationResult
from page_translator.usage.models import PageUsageLedger

AUTO_DETECT = "Auto (Detect)"


class Segment(BaseModel):
    """One original -> translated text pair found by the extraction phase."""
    model_config = ConfigDict(frozen=True)

    original: str = Field(description="Original text segment found in image")
    translated: str = Field(description="Translation in target language")
    location: str | None = Field(
        default=None,
        description="Brief description of location (e.g., Header, Table Row 1, Footer)",
    )


class TranslationSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_language: str
    source_language: str = AUTO_DETECT
    mode: TranslationMode = TranslationMode.DIRECT
    glossary: str | None = None

    @field_validator("target_language", "source_language")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("glossary")
    @classmethod
    def _empty_glossary_is_none(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None


class PageRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1)
    original_image: str  # data URL
    translated_image: str | None = None
    status: PageStatus = PageStatus.PENDING
    error_message: str | None = None
    usage: PageUsageLedger | None = None
    evaluation: EvaluationResult | None = None
    is_evaluating: bool = False
    prompt_used: str | None = None
    segments: list[Segment] | None = None
    extracted_segments: str | None = None
    # Identifies the translation attempt whose results may still land on this page.
    attempt_id: str | None = None

    @property
    def needs_evaluation_rerun(self) -> bool:
        return (
            self.status == PageStatus.DONE
            and self.translated_image is not None
            and (self.evaluation is None or self.evaluation.needs_rerun)
        )
