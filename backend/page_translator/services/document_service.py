# page_translator/services/document_service.py
"""
document_service.py
- Purpose: Turn an uploaded document (PDF or one image) into page images.
- Design: validation lives in validations/file_validators.py; rendering in pdf/rasterize.py.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import UploadFile

from page_translator.images import image_dimensions, parse_data_url, to_data_url
from page_translator.pdf.rasterize import get_page_count, render_pages
from page_translator.validations.file_validators import (
    validate_document_upload,
    validate_page_range,
    validate_size,
)

logger = logging.getLogger("page_translator.documents")


def document_name(filename: str | None) -> str:
    return Path(filename or "document").stem or "document"


async def read_upload(
    upload: UploadFile,
    *,
    start: int | None = None,
    end: int | None = None,
    scale: float = 2.0,
) -> tuple[int, list[str]]:
    """Returns the first page's number in the source document and one data URL per page."""
    kind = validate_document_upload(upload)
    data = validate_size(await upload.read())

    if kind == "image":
        url = to_data_url(data, (upload.content_type or "image/png").replace("image/jpg", "image/jpeg"))
        # Fails with a 422 AppError if the bytes are not a decodable image
        image_dimensions(parse_data_url(url))
        logger.info("document.image_loaded", extra={"upload_filename": upload.filename})
        return 1, [url]

    first, last = validate_page_range(start, end, get_page_count(data))
    pages = render_pages(data, start=first, end=last, scale=scale)
    logger.info(
        "document.pdf_rendered",
        extra={"upload_filename": upload.filename, "first": first, "last": last, "scale": scale},
    )
    return first, pages
