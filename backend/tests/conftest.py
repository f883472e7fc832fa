import asyncio
from collections import defaultdict

import fitz
import pytest

from page_translator.images import to_data_url
from page_translator.llm.retry import RetryPolicy
from page_translator.llm.types import AuditResult, ExtractionResult, RawUsage, RedrawResult
from page_translator.schemas.evaluation import EvaluationScores
from page_translator.schemas.page import Segment
from page_translator.services.evaluation_service import EvaluationPipeline
from page_translator.services.lifecycle_service import PageLifecycleController
from page_translator.services.page_store import PageStore
from page_translator.services.translation_service import TranslationPipeline
from page_translator.usage.cost import Pricing, UsageAccountant


def png_data_url(width: int, height: int) -> str:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(255)
    return to_data_url(pix.tobytes("png"), "image/png")


class FakeClient:
    """In-memory stand-in for GenerationClient.

    Each *_script is a list consumed front to back; an item is either a result to
    return or an exception to raise. An empty script falls back to a success.
    """

    def __init__(self):
        self.configured = True
        self.extract_script: list = []
        self.redraw_script: list = []
        self.audit_script: list = []
        self.redraw_gate: asyncio.Event | None = None
        self.audit_gate: asyncio.Event | None = None
        self.calls: dict[str, list[dict]] = defaultdict(list)

    def is_configured(self) -> bool:
        return self.configured

    @staticmethod
    def _next(script: list, default):
        item = script.pop(0) if script else default
        if isinstance(item, BaseException):
            raise item
        return item

    async def extract(self, image, *, source_language, target_language, glossary=None, feedback=None):
        self.calls["extract"].append({"target_language": target_language, "feedback": feedback})
        return self._next(
            self.extract_script,
            ExtractionResult(
                segments=[Segment(original="Hola", translated="Hello", location="Header")],
                usage=RawUsage(model="reasoning", input_tokens=100, output_tokens=20),
            ),
        )

    async def redraw(self, image, *, instructions, aspect_ratio):
        self.calls["redraw"].append({"instructions": instructions, "aspect_ratio": aspect_ratio})
        if self.redraw_gate is not None:
            await self.redraw_gate.wait()
        return self._next(
            self.redraw_script,
            RedrawResult(
                image=png_data_url(30, 40),
                usage=RawUsage(model="image", input_tokens=1000, output_tokens=500, prompt=instructions),
            ),
        )

    async def audit(self, original, translated, *, criteria, source_language, target_language, glossary=None):
        self.calls["audit"].append({"target_language": target_language, "glossary": glossary})
        item = self.audit_script.pop(0) if self.audit_script else None
        if self.audit_gate is not None:
            await self.audit_gate.wait()
        return self._next(
            [item] if item is not None else [],
            AuditResult(
                scores=EvaluationScores(**{d: 8 for d in EvaluationScores.dimensions()}),
                usage=RawUsage(model="reasoning", input_tokens=300, output_tokens=60),
                reason="Looks right",
                suggestions="",
            ),
        )


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def accountant():
    return UsageAccountant(Pricing(input_per_million=3.5, output_per_million=10.5))


@pytest.fixture
def policy():
    return RetryPolicy(max_attempts=3, delay_seconds=10.0)


@pytest.fixture
def translator(fake_client, accountant, policy, recording_sleep):
    return TranslationPipeline(fake_client, accountant, retry_policy=policy, sleep=recording_sleep)


@pytest.fixture
def evaluator(fake_client, accountant, policy, recording_sleep):
    return EvaluationPipeline(fake_client, accountant, retry_policy=policy, sleep=recording_sleep)


@pytest.fixture
def make_controller(translator, evaluator):
    def _make(pages=()):
        return PageLifecycleController(PageStore(pages), translator, evaluator)

    return _make
