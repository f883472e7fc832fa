"""
pages.py
- Purpose: Document upload, page listing and the translate/evaluate/retry operations.
- Design: Keep router thin. Long operations are scheduled on the event loop and
  answered with 202; clients poll GET /api/pages for progress.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response

from page_translator.api.deps import Workspace, get_workspace
from page_translator.core.errors import not_found
from page_translator.images import parse_data_url
from page_translator.schemas.api import (
    AcceptedResponse,
    PageListResponse,
    PageSummary,
    RetryPageRequest,
    StartTranslationRequest,
)
from page_translator.services.document_service import document_name, read_upload

router = APIRouter(prefix="/api", tags=["Pages"])


def _listing(ws: Workspace) -> PageListResponse:
    c = ws.controller
    return PageListResponse(
        processing_status=c.processing_status,
        settings=c.settings,
        pages=[PageSummary.from_page(p) for p in c.store.pages()],
    )


@router.post("/documents", response_model=PageListResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    start_page: int | None = Form(None),
    end_page: int | None = Form(None),
    ws: Workspace = Depends(get_workspace),
):
    first_page, images = await read_upload(file, start=start_page, end=end_page, scale=ws.raster_scale)
    ws.controller.ingest_pages(images, first_page=first_page)
    ws.document_name = document_name(file.filename)
    return _listing(ws)


@router.get("/pages", response_model=PageListResponse)
def list_pages(ws: Workspace = Depends(get_workspace)):
    return _listing(ws)


@router.delete("/pages", status_code=status.HTTP_204_NO_CONTENT)
def reset_pages(ws: Workspace = Depends(get_workspace)):
    ws.controller.reset()
    ws.document_name = "document"
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/pages/{page_number}/images/{which}")
def get_page_image(page_number: int, which: str, ws: Workspace = Depends(get_workspace)):
    page = ws.controller.store.get(page_number)
    url = None
    if page is not None:
        url = {"original": page.original_image, "translated": page.translated_image}.get(which)
    if url is None:
        raise not_found(details={"page_number": page_number, "image": which})
    image = parse_data_url(url)
    return Response(content=image.data, media_type=image.mime_type)


@router.post("/translations", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_translation(body: StartTranslationRequest, ws: Workspace = Depends(get_workspace)):
    ws.controller.start_batch_translation(body.settings(), body.page_numbers)
    return AcceptedResponse(operation="batch_translation")


@router.post("/pages/retry-failed", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def retry_failed_pages(ws: Workspace = Depends(get_workspace)):
    ws.controller.retry_failed_pages()
    return AcceptedResponse(operation="retry_failed_pages")


@router.post("/pages/{page_number}/retry", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def retry_page(page_number: int, body: RetryPageRequest | None = None, ws: Workspace = Depends(get_workspace)):
    ws.controller.retry_page(page_number, body.feedback if body else None)
    return AcceptedResponse(operation="retry_page")


@router.post(
    "/pages/{page_number}/evaluation/retry",
    response_model=AcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def retry_evaluation(page_number: int, ws: Workspace = Depends(get_workspace)):
    ws.controller.retry_evaluation(page_number)
    return AcceptedResponse(operation="retry_evaluation")


@router.post("/evaluations/retry-failed", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def retry_failed_evaluations(ws: Workspace = Depends(get_workspace)):
    ws.controller.retry_failed_evaluations()
    return AcceptedResponse(operation="retry_failed_evaluations")
