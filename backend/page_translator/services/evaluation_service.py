# page_translator/services/evaluation_service.py
"""
evaluation_service.py
- Purpose: Audit a translated page against its original and score it.
- Design: never raises. Exhausted retries, malformed answers and unreadable images
  all produce the zero-score fallback so reporting always has a result to render.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from page_translator.constants.statuses import UsageStage
from page_translator.images import parse_data_url
from page_translator.llm.errors import LLMError
from page_translator.llm.retry import RetryPolicy, Sleep, with_retry
from page_translator.llm.types import AuditResult, ImagePart
from page_translator.schemas.evaluation import EvaluationResult, EvaluationScores
from page_translator.usage.cost import UsageAccountant
from page_translator.usage.models import UsageRecord

logger = logging.getLogger("page_translator.evaluation")

CRITERIA_DESCRIPTIONS: dict[str, str] = {
    "accuracy": "Meaning of every translated segment matches the original.",
    "fluency": "Reads naturally to a native speaker of the target language.",
    "consistency": "The same term is translated the same way throughout the page.",
    "terminology": "Domain terms and glossary entries are used correctly.",
    "completeness": (
        "All document text is translated and the target script is not mixed. "
        "Untranslated brand names and consolidated bilingual duplicates are NOT omissions."
    ),
    "format_preservation": "Layout, fonts, colors and whitespace match the original; nothing is stretched.",
    "spelling": "No typos or malformed characters.",
    "trademark_protection": "Brand names, product names and trademarks are left untouched (reward this, do not penalize it).",
    "redundancy_removal": "Content the original repeats in two languages appears once, in the target language (reward this, do not penalize it).",
}


def build_audit_criteria() -> str:
    lines = []
    for i, name in enumerate(EvaluationScores.dimensions(), start=1):
        lines.append(f"{i}. {name}: {CRITERIA_DESCRIPTIONS.get(name, '')}".rstrip())
    return "\n".join(lines)


class AuditClient(Protocol):
    async def audit(
        self,
        original: ImagePart,
        translated: ImagePart,
        *,
        criteria: str,
        source_language: str,
        target_language: str,
        glossary: str | None = None,
    ) -> AuditResult: ...


@dataclass(frozen=True)
class EvaluationOutcome:
    result: EvaluationResult
    usage: UsageRecord | None


class EvaluationPipeline:
    def __init__(
        self,
        client: AuditClient,
        accountant: UsageAccountant,
        *,
        retry_policy: RetryPolicy = RetryPolicy(),
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.accountant = accountant
        self.retry_policy = retry_policy
        self.sleep = sleep
        self.criteria = build_audit_criteria()

    async def evaluate(
        self,
        original_image: str,
        translated_image: str,
        *,
        target_language: str,
        source_language: str,
        glossary: str | None = None,
    ) -> EvaluationOutcome:
        try:
            original = parse_data_url(original_image)
            translated = parse_data_url(translated_image)
            audit = await with_retry(
                lambda: self.client.audit(
                    original,
                    translated,
                    criteria=self.criteria,
                    source_language=source_language,
                    target_language=target_language,
                    glossary=glossary,
                ),
                policy=self.retry_policy,
                sleep=self.sleep,
                label="evaluation",
            )
        except LLMError as e:
            logger.warning(
                "evaluation.fallback",
                extra={"cause": "retries_exhausted", "error_type": type(e).__name__, "error": str(e)},
            )
            return EvaluationOutcome(result=EvaluationResult.unavailable(), usage=None)
        except Exception:
            logger.exception("evaluation.fallback", extra={"cause": "unexpected"})
            return EvaluationOutcome(result=EvaluationResult.unavailable(), usage=None)

        record = self.accountant.record(audit.usage, UsageStage.EVALUATION)

        if audit.malformed or audit.scores is None:
            logger.warning("evaluation.fallback", extra={"cause": "malformed_response"})
            return EvaluationOutcome(
                result=EvaluationResult.unavailable("malformed response"),
                usage=record,
            )

        result = EvaluationResult(scores=audit.scores, reason=audit.reason, suggestions=audit.suggestions)
        logger.info("evaluation.done", extra={"average_score": result.average_score})
        return EvaluationOutcome(result=result, usage=record)
