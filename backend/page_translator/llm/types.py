# page_translator/llm/types.py
from dataclasses import dataclass
from typing import Any, Literal

from page_translator.schemas.evaluation import EvaluationScores
from page_translator.schemas.page import Segment


@dataclass(frozen=True)
class ModelConfig:
    """Read-only model settings handed to the generation client at construction."""
    image_model: str
    reasoning_model: str
    image_size: str = "4K"
    timeout_seconds: int = 180
    extraction_temperature: float = 0.1
    feedback_language: str = "English"
    log_prompts: bool = False


@dataclass(frozen=True)
class ImagePart:
    mime_type: str
    data: bytes


@dataclass(frozen=True)
class LLMRequest:
    trace_id: str
    purpose: str                    # "extraction" | "translation" | "evaluation"
    model: str
    prompt: str
    images: tuple[ImagePart, ...] = ()

    temperature: float | None = None
    timeout_seconds: int = 180

    # Structured JSON output (extraction / audit)
    response_mime_type: str | None = None  # e.g. "application/json"
    response_schema: Any = None

    # Image output (redraw)
    aspect_ratio: str | None = None  # e.g. "3:4"
    image_size: str | None = None    # e.g. "4K"

    provider: str = "gemini"


@dataclass(frozen=True)
class LLMResponse:
    trace_id: str
    provider: str
    model: str
    output_text: str
    latency_ms: int
    images: tuple[ImagePart, ...] = ()
    input_tokens: int | None = None
    output_tokens: int | None = None


@dataclass(frozen=True)
class RawUsage:
    """Token counts exactly as reported by one remote call."""
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    prompt: str | None = None


# ---- tagged results of the three remote operations ----

@dataclass(frozen=True)
class ExtractionResult:
    segments: list[Segment]
    usage: RawUsage
    malformed: bool = False
    kind: Literal["extraction"] = "extraction"


@dataclass(frozen=True)
class RedrawResult:
    image: str  # data URL
    usage: RawUsage
    kind: Literal["redraw"] = "redraw"


@dataclass(frozen=True)
class AuditResult:
    scores: EvaluationScores | None
    usage: RawUsage
    reason: str = ""
    suggestions: str = ""
    malformed: bool = False
    kind: Literal["audit"] = "audit"
