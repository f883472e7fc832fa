"""
events.py
- Purpose: Messages that pipeline work emits about a page.
- Design: every event names the page and the attempt it belongs to. The page store
  applies an event only if that page still exists and is still on that attempt.
"""

from __future__ import annotations

from dataclasses import dataclass

from page_translator.services.evaluation_service import EvaluationOutcome
from page_translator.services.translation_service import TranslationOutcome


@dataclass(frozen=True)
class PageEvent:
    page_number: int
    attempt_id: str | None


@dataclass(frozen=True)
class TranslationStarted(PageEvent):
    pass


@dataclass(frozen=True)
class TranslationSucceeded(PageEvent):
    outcome: TranslationOutcome


@dataclass(frozen=True)
class TranslationFailed(PageEvent):
    message: str


@dataclass(frozen=True)
class EvaluationStarted(PageEvent):
    pass


@dataclass(frozen=True)
class EvaluationCompleted(PageEvent):
    outcome: EvaluationOutcome
