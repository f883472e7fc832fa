"""
Usage records and the per-page ledger.

A UsageRecord is immutable. A ledger only ever grows by appending records, and its
`total` is recomputed from the per-stage lists every time it is read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, computed_field

from page_translator.constants.statuses import UsageStage


class UsageRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_tokens: int = Field(ge=0)
    output_tokens: int = Field(ge=0)
    cost: float = Field(ge=0)
    model: str
    stage: UsageStage
    prompt: str | None = None
    created_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class UsageTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost: float = 0.0

    def __add__(self, other: "UsageTotals") -> "UsageTotals":
        return UsageTotals(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            cost=self.cost + other.cost,
        )


def fold_usage(records: Iterable[UsageRecord]) -> UsageTotals:
    input_tokens = 0
    output_tokens = 0
    total_tokens = 0
    cost = 0.0
    for r in records:
        input_tokens += r.input_tokens
        output_tokens += r.output_tokens
        total_tokens += r.total_tokens
        cost += r.cost
    return UsageTotals(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total_tokens,
        cost=cost,
    )


class PageUsageLedger(BaseModel):
    model_config = ConfigDict(frozen=True)

    extraction: tuple[UsageRecord, ...] = ()
    translation: tuple[UsageRecord, ...] = ()
    evaluation: tuple[UsageRecord, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> UsageTotals:
        return fold_usage(self.records())

    def records(self) -> list[UsageRecord]:
        return [*self.extraction, *self.translation, *self.evaluation]

    def stage(self, stage: UsageStage) -> tuple[UsageRecord, ...]:
        return getattr(self, stage.value)

    def append(self, *records: UsageRecord) -> "PageUsageLedger":
        """Return a new ledger with `records` appended to their stages."""
        lists = {
            UsageStage.EXTRACTION: list(self.extraction),
            UsageStage.TRANSLATION: list(self.translation),
            UsageStage.EVALUATION: list(self.evaluation),
        }
        for r in records:
            lists[r.stage].append(r)
        return PageUsageLedger(
            extraction=tuple(lists[UsageStage.EXTRACTION]),
            translation=tuple(lists[UsageStage.TRANSLATION]),
            evaluation=tuple(lists[UsageStage.EVALUATION]),
        )
