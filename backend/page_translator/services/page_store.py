"""
page_store.py
- Purpose: The shared page collection.
- Design: all writes are keyed partial patches computed from the page's current
  value at the moment of writing. Nothing awaits between reading and writing, so
  under a single event loop a patch can never be based on a stale copy.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from page_translator.constants.statuses import PageStatus
from page_translator.schemas.page import PageRecord
from page_translator.services.events import (
    EvaluationCompleted,
    EvaluationStarted,
    PageEvent,
    TranslationFailed,
    TranslationStarted,
    TranslationSucceeded,
)
from page_translator.usage.models import PageUsageLedger

logger = logging.getLogger("page_translator.page_store")

Patch = dict[str, Any]


class PageStore:
    def __init__(self, pages: Iterable[PageRecord] = ()):
        self._pages: dict[int, PageRecord] = {}
        self.replace_all(pages)

    # ----------------------------
    # Reads
    # ----------------------------
    def pages(self) -> list[PageRecord]:
        return [self._pages[n] for n in sorted(self._pages)]

    def get(self, page_number: int) -> PageRecord | None:
        return self._pages.get(page_number)

    def __len__(self) -> int:
        return len(self._pages)

    # ----------------------------
    # Writes
    # ----------------------------
    def replace_all(self, pages: Iterable[PageRecord]) -> None:
        """Ingest or restore. In-flight results for old pages are dropped by the attempt guard."""
        self._pages = {p.page_number: p for p in pages}

    def clear(self) -> None:
        self._pages = {}

    def update(
        self,
        page_number: int,
        patch: Callable[[PageRecord], Patch | None],
    ) -> PageRecord | None:
        current = self._pages.get(page_number)
        if current is None:
            return None
        changes = patch(current)
        if changes is None:
            return None
        updated = current.model_copy(update=changes)
        self._pages[page_number] = updated
        return updated

    def patch(self, page_number: int, **changes: Any) -> PageRecord | None:
        return self.update(page_number, lambda _page: changes)

    def apply(self, event: PageEvent) -> PageRecord | None:
        """Merge an event into current state; a no-op for missing or superseded pages."""
        reducer = _REDUCERS[type(event)]

        def _guarded(page: PageRecord) -> Patch | None:
            if not isinstance(event, TranslationStarted) and page.attempt_id != event.attempt_id:
                logger.info(
                    "page.stale_event_dropped",
                    extra={"event": type(event).__name__, "page_number": event.page_number},
                )
                return None
            return reducer(page, event)

        updated = self.update(event.page_number, _guarded)
        if updated is None and self.get(event.page_number) is None:
            logger.info(
                "page.event_for_missing_page",
                extra={"event": type(event).__name__, "page_number": event.page_number},
            )
        return updated


# ----------------------------
# Reducers: (current page, event) -> patch
# ----------------------------
def _on_translation_started(page: PageRecord, event: TranslationStarted) -> Patch:
    return {
        "status": PageStatus.TRANSLATING,
        "error_message": None,
        "attempt_id": event.attempt_id,
    }


def _on_translation_succeeded(page: PageRecord, event: TranslationSucceeded) -> Patch:
    outcome = event.outcome
    ledger = (page.usage or PageUsageLedger()).append(*outcome.usage)
    return {
        "status": PageStatus.DONE,
        "translated_image": outcome.image,
        "usage": ledger,
        "prompt_used": outcome.prompt_used,
        "segments": list(outcome.segments) or None,
        "extracted_segments": outcome.extracted_segments,
        "error_message": None,
        "is_evaluating": True,
    }


def _on_translation_failed(page: PageRecord, event: TranslationFailed) -> Patch:
    return {
        "status": PageStatus.ERROR,
        "error_message": event.message,
        "is_evaluating": False,
    }


def _on_evaluation_started(page: PageRecord, event: EvaluationStarted) -> Patch | None:
    if page.translated_image is None:
        return None
    return {"is_evaluating": True}


def _on_evaluation_completed(page: PageRecord, event: EvaluationCompleted) -> Patch:
    outcome = event.outcome
    changes: Patch = {"evaluation": outcome.result, "is_evaluating": False}
    if outcome.usage is not None:
        changes["usage"] = (page.usage or PageUsageLedger()).append(outcome.usage)
    return changes


_REDUCERS: dict[type, Callable[[PageRecord, Any], Patch | None]] = {
    TranslationStarted: _on_translation_started,
    TranslationSucceeded: _on_translation_succeeded,
    TranslationFailed: _on_translation_failed,
    EvaluationStarted: _on_evaluation_started,
    EvaluationCompleted: _on_evaluation_completed,
}
