# page_translator/llm/telemetry.py
"""One structured `llm_call` line per remote call, success or failure."""

import logging
import time
from dataclasses import asdict, dataclass

logger = logging.getLogger("llm")


@dataclass(frozen=True)
class LLMCallLog:
    trace_id: str
    provider: str
    model: str
    purpose: str  # pipeline stage: extraction | translation | evaluation
    latency_ms: int
    ok: bool
    input_tokens: int | None = None
    output_tokens: int | None = None
    error_type: str | None = None


def now_ms() -> int:
    return int(time.monotonic() * 1000)


def log_llm_call(item: LLMCallLog) -> None:
    # Fields go into `extra` so the JSON formatter emits them as keys;
    # page_number / attempt_id come from the request context.
    level = logging.INFO if item.ok else logging.WARNING
    logger.log(level, "llm_call", extra={"llm": asdict(item)})
