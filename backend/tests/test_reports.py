import csv
import io
from datetime import datetime

import pytest

from page_translator.constants.statuses import PageStatus, UsageStage
from page_translator.llm.types import RawUsage
from page_translator.schemas.evaluation import EvaluationResult
from page_translator.schemas.page import PageRecord
from page_translator.services.report_service import (
    COST_REPORT_HEADERS,
    cost_report_csv,
    report_filename,
    summarize_usage,
)
from page_translator.usage.models import PageUsageLedger


def _ledger(accountant, *stages):
    return PageUsageLedger().append(
        *[accountant.record(RawUsage(model=f"model-{s.value}", input_tokens=1000, output_tokens=100), s) for s in stages]
    )


def _pages(accountant):
    return [
        PageRecord(
            page_number=1,
            original_image="x",
            translated_image="t",
            status=PageStatus.DONE,
            usage=_ledger(accountant, UsageStage.TRANSLATION, UsageStage.EVALUATION, UsageStage.TRANSLATION),
            evaluation=EvaluationResult.unavailable(),
        ),
        PageRecord(
            page_number=2,
            original_image="y",
            status=PageStatus.DONE,
            usage=_ledger(accountant, UsageStage.EXTRACTION, UsageStage.TRANSLATION),
        ),
        PageRecord(page_number=3, original_image="z", status=PageStatus.ERROR, error_message="429"),
    ]


def test_cost_csv_sums_every_run_and_adds_total_row(accountant):
    rows = list(csv.reader(io.StringIO(cost_report_csv(_pages(accountant)))))

    assert rows[0] == COST_REPORT_HEADERS
    assert [r[0] for r in rows[1:]] == ["1", "2", "TOTAL"]

    page1 = dict(zip(COST_REPORT_HEADERS, rows[1]))
    assert page1["EXT Input"] == "0"
    assert page1["TRANS Input"] == "2000"
    assert page1["EVAL Output"] == "100"

    total = dict(zip(COST_REPORT_HEADERS, rows[3]))
    assert total["TRANS Input"] == "3000"
    per_page = 1000 / 1e6 * 3.5 + 100 / 1e6 * 10.5
    assert float(total["TOTAL Cost ($)"]) == pytest.approx(5 * per_page, abs=1e-6)


def test_usage_summary(accountant):
    summary = summarize_usage(_pages(accountant))
    assert summary.pages_total == 3
    assert summary.pages_done == 2
    assert summary.pages_failed == 1
    assert summary.evaluations_failed == 1
    assert summary.total.input_tokens == 5000
    assert summary.by_stage["translation"].input_tokens == 3000
    assert summary.by_stage["extraction"].input_tokens == 1000
    assert set(summary.by_model) == {"model-extraction", "model-translation", "model-evaluation"}


def test_report_filename_is_safe():
    name = report_filename("My report/v2", "cost", "csv", now=datetime(2025, 3, 4, 5, 6))
    assert name == "My_report_v2_20250304_0506_cost.csv"
