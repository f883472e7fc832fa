# page_translator/usage/cost.py
from dataclasses import dataclass
from datetime import datetime, timezone

from page_translator.constants.statuses import UsageStage
from page_translator.llm.types import RawUsage
from page_translator.usage.models import UsageRecord


@dataclass(frozen=True)
class Pricing:
    """USD per one million tokens."""
    input_per_million: float
    output_per_million: float


def calculate_cost(input_tokens: int, output_tokens: int, pricing: Pricing) -> float:
    return (input_tokens / 1_000_000) * pricing.input_per_million + (
        output_tokens / 1_000_000
    ) * pricing.output_per_million


class UsageAccountant:
    """Turns raw token counts from one remote call into a priced UsageRecord."""

    def __init__(self, pricing: Pricing):
        self.pricing = pricing

    def record(
        self,
        raw: RawUsage,
        stage: UsageStage,
        *,
        keep_prompt: bool = True,
        now: datetime | None = None,
    ) -> UsageRecord:
        # Providers occasionally omit or garble counts; never price a negative.
        input_tokens = max(0, int(raw.input_tokens or 0))
        output_tokens = max(0, int(raw.output_tokens or 0))
        return UsageRecord(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=calculate_cost(input_tokens, output_tokens, self.pricing),
            model=raw.model,
            stage=stage,
            prompt=raw.prompt if keep_prompt else None,
            created_at=now or datetime.now(timezone.utc),
        )
