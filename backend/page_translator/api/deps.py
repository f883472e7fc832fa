"""
deps.py
- Purpose: Wire settings into the page lifecycle controller and hand it to routes.
- Design: one workspace per process (a single open document). Tests swap it out
  through app.dependency_overrides[get_workspace].
"""

from dataclasses import dataclass
from functools import lru_cache

from page_translator.core.config import Settings, settings
from page_translator.llm.client import GenerationClient
from page_translator.llm.providers.gemini import GeminiProvider
from page_translator.llm.retry import RetryPolicy
from page_translator.llm.types import ModelConfig
from page_translator.services.evaluation_service import EvaluationPipeline
from page_translator.services.lifecycle_service import PageLifecycleController
from page_translator.services.page_store import PageStore
from page_translator.services.translation_service import TranslationPipeline
from page_translator.usage.cost import Pricing, UsageAccountant


@dataclass
class Workspace:
    controller: PageLifecycleController
    raster_scale: float = 2.0
    document_name: str = "document"


def build_controller(cfg: Settings) -> PageLifecycleController:
    models = ModelConfig(
        image_model=cfg.GEMINI_IMAGE_MODEL,
        reasoning_model=cfg.GEMINI_REASONING_MODEL,
        image_size=cfg.OUTPUT_IMAGE_SIZE,
        timeout_seconds=cfg.LLM_TIMEOUT_SECONDS,
        extraction_temperature=cfg.EXTRACTION_TEMPERATURE,
        feedback_language=cfg.AUDIT_FEEDBACK_LANGUAGE,
        log_prompts=cfg.LLM_LOG_PROMPTS,
    )
    policy = RetryPolicy(max_attempts=cfg.LLM_MAX_ATTEMPTS, delay_seconds=cfg.LLM_RETRY_DELAY_SECONDS)
    accountant = UsageAccountant(Pricing(cfg.PRICE_PER_1M_INPUT, cfg.PRICE_PER_1M_OUTPUT))
    client = GenerationClient(GeminiProvider(api_key=cfg.GEMINI_API_KEY), models)

    return PageLifecycleController(
        store=PageStore(),
        translator=TranslationPipeline(client, accountant, retry_policy=policy),
        evaluator=EvaluationPipeline(client, accountant, retry_policy=policy),
    )


@lru_cache
def get_workspace() -> Workspace:
    return Workspace(controller=build_controller(settings), raster_scale=settings.RASTER_SCALE)
