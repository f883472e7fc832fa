# page_translator/llm/client.py
"""
Remote generation client: extract, redraw and audit.

Each method is exactly one remote call. Retries, mode selection and pricing belong
to the pipelines; this class only builds the request, parses the structured answer
at the boundary and reports raw token usage.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Protocol

from pydantic import BaseModel, TypeAdapter, ValidationError

from page_translator.images import to_data_url
from page_translator.llm.errors import LLMError, LLMNonRetryableError
from page_translator.llm.prompts.instructions import feedback_clause, glossary_clause
from page_translator.llm.prompts.registry import get_prompt
from page_translator.llm.telemetry import LLMCallLog, log_llm_call, now_ms
from page_translator.llm.types import (
    AuditResult,
    ExtractionResult,
    ImagePart,
    LLMRequest,
    LLMResponse,
    ModelConfig,
    RawUsage,
    RedrawResult,
)
from page_translator.schemas.evaluation import EvaluationScores
from page_translator.schemas.page import Segment

logger = logging.getLogger("llm.client")

_SEGMENTS = TypeAdapter(list[Segment])


class AuditPayload(BaseModel):
    scores: EvaluationScores
    reason: str = ""
    suggestions: str = ""


class Provider(Protocol):
    name: str

    def is_configured(self) -> bool: ...

    async def generate(self, req: LLMRequest) -> LLMResponse: ...


class GenerationClient:
    def __init__(self, provider: Provider, models: ModelConfig):
        self.provider = provider
        self.models = models

    def is_configured(self) -> bool:
        return self.provider.is_configured()

    async def _call(self, req: LLMRequest) -> LLMResponse:
        start_ms = now_ms()
        if self.models.log_prompts:
            logger.info("llm.prompt", extra={"purpose": req.purpose, "prompt": req.prompt})
        try:
            resp = await self.provider.generate(req)
        except LLMError as e:
            log_llm_call(
                LLMCallLog(
                    trace_id=req.trace_id,
                    provider=req.provider,
                    model=req.model,
                    purpose=req.purpose,
                    latency_ms=(now_ms() - start_ms),
                    ok=False,
                    error_type=type(e).__name__,
                )
            )
            raise

        log_llm_call(
            LLMCallLog(
                trace_id=resp.trace_id,
                provider=resp.provider,
                model=resp.model,
                purpose=req.purpose,
                latency_ms=(now_ms() - start_ms),
                ok=True,
                input_tokens=resp.input_tokens,
                output_tokens=resp.output_tokens,
            )
        )
        return resp

    @staticmethod
    def _raw_usage(resp: LLMResponse, prompt: str) -> RawUsage:
        return RawUsage(
            model=resp.model,
            input_tokens=resp.input_tokens or 0,
            output_tokens=resp.output_tokens or 0,
            prompt=prompt,
        )

    # ----------------------------
    # Step 1 of two-step mode
    # ----------------------------
    async def extract(
        self,
        image: ImagePart,
        *,
        source_language: str,
        target_language: str,
        glossary: str | None = None,
        feedback: str | None = None,
    ) -> ExtractionResult:
        prompt = get_prompt("extract_segments", "v1").render(
            {
                "source_language": source_language,
                "target_language": target_language,
                "glossary_clause": glossary_clause(glossary),
                "feedback_clause": feedback_clause(feedback),
            }
        )
        req = LLMRequest(
            trace_id=str(uuid.uuid4()),
            purpose="extraction",
            model=self.models.reasoning_model,
            prompt=prompt,
            images=(image,),
            temperature=self.models.extraction_temperature,
            timeout_seconds=self.models.timeout_seconds,
            response_mime_type="application/json",
            response_schema=list[Segment],
            provider=self.provider.name,
        )
        resp = await self._call(req)
        usage = self._raw_usage(resp, prompt)

        try:
            segments = _SEGMENTS.validate_python(json.loads(resp.output_text or "[]"))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "llm.extraction.malformed",
                extra={"trace_id": req.trace_id, "error": str(e)[:500]},
            )
            return ExtractionResult(segments=[], usage=usage, malformed=True)

        segments = [s for s in segments if s.original.strip()]
        return ExtractionResult(segments=segments, usage=usage)

    # ----------------------------
    # Page redraw (both modes)
    # ----------------------------
    async def redraw(self, image: ImagePart, *, instructions: str, aspect_ratio: str) -> RedrawResult:
        req = LLMRequest(
            trace_id=str(uuid.uuid4()),
            purpose="translation",
            model=self.models.image_model,
            prompt=instructions,
            images=(image,),
            timeout_seconds=self.models.timeout_seconds,
            aspect_ratio=aspect_ratio,
            image_size=self.models.image_size,
            provider=self.provider.name,
        )
        resp = await self._call(req)
        if not resp.images:
            raise LLMNonRetryableError("No image data returned from Gemini.")

        out = resp.images[0]
        return RedrawResult(image=to_data_url(out.data, out.mime_type), usage=self._raw_usage(resp, instructions))

    # ----------------------------
    # Quality audit
    # ----------------------------
    async def audit(
        self,
        original: ImagePart,
        translated: ImagePart,
        *,
        criteria: str,
        source_language: str,
        target_language: str,
        glossary: str | None = None,
    ) -> AuditResult:
        prompt = get_prompt("audit_page", "v1").render(
            {
                "source_language": source_language,
                "target_language": target_language,
                "glossary_line": f"- Glossary protocol: {glossary}" if glossary else "",
                "criteria": criteria,
                "feedback_language": self.models.feedback_language,
            }
        )
        req = LLMRequest(
            trace_id=str(uuid.uuid4()),
            purpose="evaluation",
            model=self.models.reasoning_model,
            prompt=prompt,
            images=(original, translated),
            timeout_seconds=self.models.timeout_seconds,
            response_mime_type="application/json",
            response_schema=AuditPayload,
            provider=self.provider.name,
        )
        resp = await self._call(req)
        usage = self._raw_usage(resp, prompt)

        try:
            payload = AuditPayload.model_validate(json.loads(resp.output_text or "{}"))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "llm.audit.malformed",
                extra={"trace_id": req.trace_id, "error": str(e)[:500]},
            )
            return AuditResult(scores=None, usage=usage, malformed=True)

        return AuditResult(
            scores=payload.scores,
            usage=usage,
            reason=payload.reason,
            suggestions=payload.suggestions,
        )
