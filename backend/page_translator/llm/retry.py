# page_translator/llm/retry.py
"""
Fixed-interval retry for remote calls.

One attempt budget, one fixed delay, one predicate deciding what is transient.
The delay is an awaited sleep so other coroutines (for example detached page
evaluations) keep running while a page waits out a rate limit.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from page_translator.llm.errors import LLMRetryableError

logger = logging.getLogger("llm.retry")

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

_TRANSIENT_MARKERS = (
    "429",
    "rate limit",
    "rate_limit",
    "quota",
    "resource_exhausted",
    "resource exhausted",
    "500",
    "502",
    "503",
    "504",
    "internal",
    "unavailable",
    "overloaded",
    "temporarily",
)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay_seconds: float = 10.0


def looks_transient(message: str) -> bool:
    """Keyword check for provider messages that carry no status code."""
    msg = (message or "").lower()
    return any(marker in msg for marker in _TRANSIENT_MARKERS)


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, LLMRetryableError)


def should_retry(
    error: BaseException,
    attempts_left: int,
    retryable: Callable[[BaseException], bool] = is_retryable,
) -> bool:
    return attempts_left > 0 and retryable(error)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy = RetryPolicy(),
    retryable: Callable[[BaseException], bool] = is_retryable,
    sleep: Sleep = asyncio.sleep,
    label: str = "llm_call",
) -> T:
    """Run `operation` up to `policy.max_attempts` times.

    Non-retryable errors propagate after the first attempt. After the last
    attempt the final error propagates unchanged.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as e:
            attempts_left = policy.max_attempts - attempt
            if not should_retry(e, attempts_left, retryable):
                if attempt > 1:
                    logger.warning(
                        "llm.retry.give_up",
                        extra={"label": label, "attempts": attempt, "error_type": type(e).__name__},
                    )
                raise

            logger.warning(
                "llm.retry.wait",
                extra={
                    "label": label,
                    "attempt": attempt,
                    "attempts_left": attempts_left,
                    "delay_seconds": policy.delay_seconds,
                    "error": str(e),
                },
            )
            await sleep(policy.delay_seconds)
