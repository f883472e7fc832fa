from datetime import datetime, timezone

import pytest

from page_translator.constants.statuses import UsageStage
from page_translator.llm.types import RawUsage
from page_translator.usage.cost import Pricing, UsageAccountant, calculate_cost
from page_translator.usage.models import PageUsageLedger, fold_usage

PRICING = Pricing(input_per_million=3.5, output_per_million=10.5)


def test_calculate_cost_uses_per_million_rates():
    assert calculate_cost(1_000_000, 0, PRICING) == pytest.approx(3.5)
    assert calculate_cost(0, 1_000_000, PRICING) == pytest.approx(10.5)
    assert calculate_cost(0, 0, PRICING) == 0


@pytest.mark.parametrize("a,b", [(0, 0), (1, 1), (1234, 987), (250_000, 3), (7, 4_000_000)])
def test_calculate_cost_is_linear(a, b):
    assert calculate_cost(2 * a, 2 * b, PRICING) == pytest.approx(2 * calculate_cost(a, b, PRICING))
    assert calculate_cost(a, b, PRICING) == pytest.approx(
        calculate_cost(a, 0, PRICING) + calculate_cost(0, b, PRICING)
    )
    assert calculate_cost(a, b, PRICING) == calculate_cost(a, b, PRICING)


def test_accountant_clamps_negative_counts():
    rec = UsageAccountant(PRICING).record(RawUsage(model="m", input_tokens=-5, output_tokens=10), UsageStage.TRANSLATION)
    assert rec.input_tokens == 0
    assert rec.output_tokens == 10
    assert rec.total_tokens == 10
    assert rec.cost == pytest.approx(calculate_cost(0, 10, PRICING))


def test_accountant_can_drop_prompt():
    raw = RawUsage(model="m", input_tokens=1, output_tokens=1, prompt="secret")
    acc = UsageAccountant(PRICING)
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert acc.record(raw, UsageStage.EVALUATION, now=now).prompt == "secret"
    assert acc.record(raw, UsageStage.EVALUATION, keep_prompt=False).prompt is None
    assert acc.record(raw, UsageStage.EVALUATION, now=now).created_at == now


def _records(n):
    acc = UsageAccountant(PRICING)
    stages = [UsageStage.EXTRACTION, UsageStage.TRANSLATION, UsageStage.EVALUATION]
    return [
        acc.record(RawUsage(model="m", input_tokens=100 * (i + 1), output_tokens=7 * i), stages[i % 3])
        for i in range(n)
    ]


@pytest.mark.parametrize("n", [1, 2, 8])
def test_ledger_total_matches_fold_after_every_append(n):
    ledger = PageUsageLedger()
    for rec in _records(n):
        ledger = ledger.append(rec)
        expected = fold_usage([*ledger.extraction, *ledger.translation, *ledger.evaluation])
        assert ledger.total.input_tokens == expected.input_tokens
        assert ledger.total.output_tokens == expected.output_tokens
        assert ledger.total.total_tokens == expected.total_tokens
        assert ledger.total.cost == pytest.approx(expected.cost)
    assert len(ledger.records()) == n


def test_ledger_append_routes_by_stage_and_is_immutable():
    recs = _records(4)
    empty = PageUsageLedger()
    ledger = empty.append(*recs)
    assert empty.records() == []
    assert len(ledger.stage(UsageStage.EXTRACTION)) == 2
    assert len(ledger.stage(UsageStage.TRANSLATION)) == 1
    assert len(ledger.stage(UsageStage.EVALUATION)) == 1
