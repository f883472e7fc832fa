# page_translator/services/lifecycle_service.py
"""
lifecycle_service.py
- Purpose: Drive pages through translation, detached evaluation and refinement.
- Owns: page state transitions, the one-at-a-time translation slot, background tasks.
- Design: public entry points validate synchronously (configuration errors surface to
  the caller immediately) and then schedule work on the running event loop. Progress
  is observed through the page store.

State machine:
  PENDING -> TRANSLATING -> DONE (is_evaluating=True until the audit resolves) | ERROR
  DONE | ERROR -> TRANSLATING on retry, carrying evaluation suggestions + user feedback
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Coroutine, Iterable, Sequence

from page_translator.constants.statuses import PageStatus, ProcessingStatus
from page_translator.core import AppError, ErrorCode, ErrorReason
from page_translator.core.errors import config_error, conflict, not_found
from page_translator.core.request_context import clear_page_context, set_context
from page_translator.llm.errors import StageFailureError
from page_translator.llm.prompts.instructions import compose_refinement_feedback
from page_translator.schemas.page import PageRecord, TranslationSettings
from page_translator.services.evaluation_service import EvaluationPipeline
from page_translator.services.events import (
    EvaluationCompleted,
    EvaluationStarted,
    TranslationFailed,
    TranslationStarted,
    TranslationSucceeded,
)
from page_translator.services.page_store import PageStore
from page_translator.services.report_service import UsageSummary, summarize_usage
from page_translator.services.translation_service import TranslationPipeline

logger = logging.getLogger("page_translator.lifecycle")


class PageLifecycleController:
    def __init__(
        self,
        store: PageStore,
        translator: TranslationPipeline,
        evaluator: EvaluationPipeline,
    ):
        self.store = store
        self.translator = translator
        self.evaluator = evaluator
        self.settings: TranslationSettings | None = None
        self.processing_status = ProcessingStatus.IDLE

        # One page translation at a time across batches and single-page retries
        self._translation_slot = asyncio.Lock()
        self._batch: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        # Bumped whenever the page collection is replaced; older work stops at the next page
        self._generation = 0
        # Pages waiting for the translation slot
        self._queued: set[int] = set()

    # ----------------------------
    # Page collection
    # ----------------------------
    def ingest_pages(self, images: Sequence[str], *, first_page: int = 1) -> list[PageRecord]:
        """Replace the collection; pages keep their numbers in the source document."""
        pages = [
            PageRecord(page_number=n, original_image=img) for n, img in enumerate(images, start=first_page)
        ]
        self._start_new_session()
        self.store.replace_all(pages)
        logger.info("pages.ingested", extra={"count": len(pages), "first_page": first_page})
        return pages

    def restore(self, settings: TranslationSettings | None, pages: Iterable[PageRecord]) -> None:
        # Pages saved mid-flight come back as they were last seen, minus the spinner
        restored = [
            p.model_copy(update={"is_evaluating": False, "status": PageStatus.PENDING})
            if p.status == PageStatus.TRANSLATING
            else p.model_copy(update={"is_evaluating": False})
            for p in pages
        ]
        self._start_new_session()
        self.store.replace_all(restored)
        self.settings = settings

    def reset(self) -> None:
        self._start_new_session()
        self.store.clear()
        self.settings = None
        logger.info("pages.reset")

    def _start_new_session(self) -> None:
        self._generation += 1
        self._batch = None
        self._queued.clear()
        self.processing_status = ProcessingStatus.IDLE

    def usage_summary(self) -> UsageSummary:
        return summarize_usage(self.store.pages())

    # ----------------------------
    # Validation (fails fast, before any remote call)
    # ----------------------------
    def _require_client(self) -> None:
        if not self.translator.client.is_configured():
            raise config_error(ErrorReason.API_KEY_REQUIRED, code=ErrorCode.API_KEY_MISSING)

    def _require_settings(self, settings: TranslationSettings | None) -> TranslationSettings:
        self._require_client()
        if settings is None or not settings.target_language:
            raise config_error(ErrorReason.TARGET_LANGUAGE_REQUIRED, code=ErrorCode.TARGET_LANGUAGE_MISSING)
        return settings

    def _require_page(self, page_number: int) -> PageRecord:
        page = self.store.get(page_number)
        if page is None:
            raise not_found(details={"page_number": page_number})
        return page

    # ----------------------------
    # Fire-and-forget entry points
    # ----------------------------
    def start_batch_translation(
        self,
        settings: TranslationSettings,
        page_numbers: Sequence[int] | None = None,
    ) -> asyncio.Task:
        settings = self._require_settings(settings)
        if self._batch is not None and not self._batch.done():
            raise conflict(details={"operation": "batch_translation"})

        if page_numbers is None:
            page_numbers = [p.page_number for p in self.store.pages() if p.status != PageStatus.DONE]
        else:
            for n in page_numbers:
                self._require_page(n)

        self.settings = settings
        jobs = [(n, None) for n in page_numbers]
        self._batch = self._spawn_batch(settings, jobs, name="batch_translation")
        return self._batch

    def retry_failed_pages(self) -> asyncio.Task:
        settings = self._require_settings(self.settings)
        if self._batch is not None and not self._batch.done():
            raise conflict(details={"operation": "batch_translation"})

        jobs = [
            (p.page_number, compose_refinement_feedback(p.evaluation.suggestions if p.evaluation else None, None))
            for p in self.store.pages()
            if p.status == PageStatus.ERROR
        ]
        self._batch = self._spawn_batch(settings, jobs, name="retry_failed_pages")
        return self._batch

    def retry_page(self, page_number: int, feedback: str | None = None) -> asyncio.Task:
        settings = self._require_settings(self.settings)
        page = self._require_page(page_number)
        if page.status not in (PageStatus.DONE, PageStatus.ERROR):
            raise conflict(details={"page_number": page_number, "status": page.status.value})
        if page_number in self._queued:
            raise conflict(details={"page_number": page_number, "queued": True})

        combined = compose_refinement_feedback(
            page.evaluation.suggestions if page.evaluation else None,
            feedback,
        )
        self._queued.add(page_number)
        return self._spawn(
            self.translate_page(page_number, settings, feedback=combined, generation=self._generation),
            name=f"retry_page_{page_number}",
        )

    def retry_evaluation(self, page_number: int) -> asyncio.Task:
        settings = self._require_settings(self.settings)
        page = self._require_page(page_number)
        if page.translated_image is None:
            raise AppError(
                code=ErrorCode.CONFLICT,
                reason=ErrorReason.INVALID_INPUT.value,
                message="Page has no translated image to evaluate",
                status_code=409,
            )
        self.store.apply(EvaluationStarted(page_number, page.attempt_id))
        return self._spawn(
            self.evaluate_page(page_number, page.attempt_id, settings),
            name=f"retry_evaluation_{page_number}",
        )

    def retry_failed_evaluations(self) -> asyncio.Task:
        settings = self._require_settings(self.settings)
        targets = [p for p in self.store.pages() if p.needs_evaluation_rerun]
        for p in targets:
            self.store.apply(EvaluationStarted(p.page_number, p.attempt_id))
        return self._spawn(
            self._evaluate_sequentially(settings, [(p.page_number, p.attempt_id) for p in targets]),
            name="retry_failed_evaluations",
        )

    # ----------------------------
    # Work bodies
    # ----------------------------
    def _spawn_batch(
        self,
        settings: TranslationSettings,
        jobs: Sequence[tuple[int, str | None]],
        *,
        name: str,
    ) -> asyncio.Task:
        self._queued.update(n for n, _ in jobs)
        return self._spawn(self.run_batch(settings, jobs, generation=self._generation), name=name)

    async def run_batch(
        self,
        settings: TranslationSettings,
        jobs: Sequence[tuple[int, str | None]],
        *,
        generation: int | None = None,
    ) -> None:
        generation = self._generation if generation is None else generation
        self.processing_status = ProcessingStatus.TRANSLATING
        logger.info("batch.start", extra={"pages": len(jobs), "mode": settings.mode.value})
        for page_number, feedback in jobs:
            if generation != self._generation:
                logger.info("batch.abandoned", extra={"remaining_from": page_number})
                return
            await self.translate_page(page_number, settings, feedback=feedback, generation=generation)
        if generation != self._generation:
            return
        self.processing_status = ProcessingStatus.COMPLETED
        logger.info("batch.done", extra={"pages": len(jobs)})

    async def translate_page(
        self,
        page_number: int,
        settings: TranslationSettings,
        *,
        feedback: str | None = None,
        generation: int | None = None,
    ) -> PageRecord | None:
        async with self._translation_slot:
            if generation is not None:
                if generation != self._generation:
                    # The collection was reset or replaced while this page waited
                    return None
                self._queued.discard(page_number)
            attempt_id = uuid.uuid4().hex
            page = self.store.apply(TranslationStarted(page_number, attempt_id))
            if page is None:
                # Reset while queued
                return None

            set_context(page_number=page_number, attempt_id=attempt_id)
            try:
                logger.info("page.translating", extra={"refinement": bool(feedback)})
                try:
                    outcome = await self.translator.translate(page.original_image, settings, feedback=feedback)
                except StageFailureError as e:
                    logger.warning("page.error", extra={"stage": e.stage, "error": str(e)})
                    return self.store.apply(TranslationFailed(page_number, attempt_id, str(e)))
                except AppError as e:
                    logger.warning("page.error", extra={"code": e.code, "error": str(e)})
                    return self.store.apply(TranslationFailed(page_number, attempt_id, str(e)))
                except Exception as e:
                    logger.exception("page.error")
                    return self.store.apply(TranslationFailed(page_number, attempt_id, str(e) or "Translation failed"))

                done = self.store.apply(TranslationSucceeded(page_number, attempt_id, outcome))
                if done is not None:
                    # Not awaited: the next page may start while this one is audited
                    self._spawn(
                        self.evaluate_page(page_number, attempt_id, settings),
                        name=f"evaluate_page_{page_number}",
                    )
                return done
            finally:
                clear_page_context()

    async def evaluate_page(
        self,
        page_number: int,
        attempt_id: str | None,
        settings: TranslationSettings,
    ) -> PageRecord | None:
        page = self.store.get(page_number)
        if page is None or page.attempt_id != attempt_id or page.translated_image is None:
            return None

        set_context(page_number=page_number, attempt_id=attempt_id)
        outcome = await self.evaluator.evaluate(
            page.original_image,
            page.translated_image,
            target_language=settings.target_language,
            source_language=settings.source_language,
            glossary=settings.glossary,
        )
        return self.store.apply(EvaluationCompleted(page_number, attempt_id, outcome))

    async def _evaluate_sequentially(
        self,
        settings: TranslationSettings,
        targets: Sequence[tuple[int, str | None]],
    ) -> None:
        for page_number, attempt_id in targets:
            await self.evaluate_page(page_number, attempt_id, settings)

    # ----------------------------
    # Background task bookkeeping
    # ----------------------------
    def _spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background_task.failed", exc_info=exc, extra={"task": task.get_name()})

    async def wait_idle(self) -> None:
        """Wait for every scheduled translation and evaluation, including ones they spawn."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
