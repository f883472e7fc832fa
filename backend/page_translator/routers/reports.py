"""
reports.py
- Purpose: Usage summary, downloadable reports, PDF exports and project save/load.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from page_translator.api.deps import Workspace, get_workspace
from page_translator.constants.statuses import PageStatus
from page_translator.core import AppError, ErrorCode, ErrorReason
from page_translator.pdf.assemble import build_comparison_pdf, build_evaluation_pdf, build_translated_pdf
from page_translator.services.project_store import dump_project, load_project
from page_translator.services.report_service import (
    UsageSummary,
    cost_report_csv,
    evaluated_pages,
    report_filename,
)

router = APIRouter(prefix="/api", tags=["Reports"])


def _nothing_to_export(reason: ErrorReason) -> AppError:
    return AppError(code=ErrorCode.NOTHING_TO_EXPORT, reason=reason.value, status_code=404)


def _download(content: bytes | str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/usage", response_model=UsageSummary)
def usage_summary(ws: Workspace = Depends(get_workspace)):
    return ws.controller.usage_summary()


@router.get("/reports/cost.csv")
def cost_report(ws: Workspace = Depends(get_workspace)):
    pages = ws.controller.store.pages()
    if not any(p.usage is not None for p in pages):
        raise _nothing_to_export(ErrorReason.NO_USAGE_DATA)
    return _download(cost_report_csv(pages), "text/csv", report_filename(ws.document_name, "cost", "csv"))


@router.get("/reports/evaluation.pdf")
def evaluation_report(ws: Workspace = Depends(get_workspace)):
    pages = evaluated_pages(ws.controller.store.pages())
    if not pages:
        raise _nothing_to_export(ErrorReason.NO_EVALUATION_DATA)
    return _download(
        build_evaluation_pdf(pages),
        "application/pdf",
        report_filename(ws.document_name, "evaluation", "pdf"),
    )


@router.get("/exports/translated.pdf")
def export_translated(ws: Workspace = Depends(get_workspace)):
    done = [p for p in ws.controller.store.pages() if p.status == PageStatus.DONE and p.translated_image]
    if not done:
        raise _nothing_to_export(ErrorReason.NO_TRANSLATED_PAGES)
    return _download(
        build_translated_pdf([p.translated_image for p in done]),
        "application/pdf",
        report_filename(ws.document_name, "translated", "pdf"),
    )


@router.get("/exports/comparison.pdf")
def export_comparison(ws: Workspace = Depends(get_workspace)):
    done = [p for p in ws.controller.store.pages() if p.status == PageStatus.DONE and p.translated_image]
    if not done:
        raise _nothing_to_export(ErrorReason.NO_TRANSLATED_PAGES)
    return _download(
        build_comparison_pdf([(p.original_image, p.translated_image) for p in done]),
        "application/pdf",
        report_filename(ws.document_name, "comparison", "pdf"),
    )


@router.get("/project")
def save_project(ws: Workspace = Depends(get_workspace)):
    c = ws.controller
    body = dump_project(c.store.pages(), c.settings, document_name=ws.document_name)
    return _download(body, "application/json", report_filename(ws.document_name, "project", "json"))


@router.post("/project")
async def open_project(file: UploadFile = File(...), ws: Workspace = Depends(get_workspace)):
    doc = load_project(await file.read())
    ws.controller.restore(doc.settings, doc.pages)
    ws.document_name = doc.document_name
    return {"document_name": doc.document_name, "pages": len(doc.pages)}
