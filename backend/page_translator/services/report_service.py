# page_translator/services/report_service.py
"""
report_service.py
- Purpose: Aggregates and downloadable reports derived from the page list.
- Design: always computed on demand from current pages; nothing is cached.
"""

from __future__ import annotations

import csv
import io
from collections import defaultdict
from datetime import datetime
from typing import Sequence

from pydantic import BaseModel

from page_translator.constants.statuses import PageStatus, UsageStage
from page_translator.schemas.page import PageRecord
from page_translator.usage.models import UsageRecord, UsageTotals, fold_usage


class UsageSummary(BaseModel):
    total: UsageTotals
    by_model: dict[str, UsageTotals]
    by_stage: dict[str, UsageTotals]
    pages_total: int
    pages_done: int
    pages_failed: int
    evaluations_failed: int


def _all_records(pages: Sequence[PageRecord]) -> list[UsageRecord]:
    out: list[UsageRecord] = []
    for p in pages:
        if p.usage is not None:
            out.extend(p.usage.records())
    return out


def summarize_usage(pages: Sequence[PageRecord]) -> UsageSummary:
    records = _all_records(pages)

    grouped_model: dict[str, list[UsageRecord]] = defaultdict(list)
    grouped_stage: dict[str, list[UsageRecord]] = defaultdict(list)
    for r in records:
        grouped_model[r.model].append(r)
        grouped_stage[r.stage.value].append(r)

    return UsageSummary(
        total=fold_usage(records),
        by_model={m: fold_usage(rs) for m, rs in sorted(grouped_model.items())},
        by_stage={s.value: fold_usage(grouped_stage.get(s.value, [])) for s in UsageStage},
        pages_total=len(pages),
        pages_done=sum(1 for p in pages if p.status == PageStatus.DONE),
        pages_failed=sum(1 for p in pages if p.status == PageStatus.ERROR),
        evaluations_failed=sum(1 for p in pages if p.needs_evaluation_rerun),
    )


COST_REPORT_HEADERS = [
    "Page Number",
    "EXT Input", "EXT Output", "EXT Cost",
    "TRANS Input", "TRANS Output", "TRANS Cost",
    "EVAL Input", "EVAL Output", "EVAL Cost",
    "TOTAL Cost ($)",
]


def cost_report_csv(pages: Sequence[PageRecord]) -> str:
    """One row per page with usage, then a TOTAL row. Stages sum every run."""
    rows: list[list] = []
    sums = [0.0] * (len(COST_REPORT_HEADERS) - 1)

    for p in pages:
        if p.usage is None:
            continue
        values: list[float] = []
        for stage in (UsageStage.EXTRACTION, UsageStage.TRANSLATION, UsageStage.EVALUATION):
            t = fold_usage(p.usage.stage(stage))
            values.extend([t.input_tokens, t.output_tokens, t.cost])
        values.append(p.usage.total.cost)

        for i, v in enumerate(values):
            sums[i] += v
        rows.append([p.page_number, *_format_row(values)])

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(COST_REPORT_HEADERS)
    writer.writerows(rows)
    writer.writerow(["TOTAL", *_format_row(sums)])
    return buf.getvalue()


def _format_row(values: Sequence[float]) -> list[str]:
    # Token columns are integers; every third column and the last one are costs
    out: list[str] = []
    for i, v in enumerate(values):
        is_cost = (i % 3 == 2) or i == len(values) - 1
        out.append(f"{v:.6f}" if is_cost else str(int(v)))
    return out


def evaluated_pages(pages: Sequence[PageRecord]) -> list[PageRecord]:
    return [p for p in pages if p.status == PageStatus.DONE and p.evaluation is not None]


def report_filename(document_name: str, category: str, extension: str, *, now: datetime | None = None) -> str:
    now = now or datetime.now()
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in (document_name or "document"))
    return f"{safe}_{now:%Y%m%d_%H%M}_{category}.{extension}"
