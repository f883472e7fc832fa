"""
file_validators.py
- Purpose: Centralized validation for document uploads (PDF or single page image).
- Design: Raise AppError with stable error codes for UI + logs.
"""

from fastapi import UploadFile

from page_translator.core import AppError, ErrorCode, ErrorReason

MAX_BYTES = 50 * 1024 * 1024  # 50MB

PDF_TYPES = {"application/pdf"}
IMAGE_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/webp"}


def validate_document_upload(upload: UploadFile) -> str:
    """Returns "pdf" or "image"."""
    if not upload or not upload.filename:
        raise AppError(code=ErrorCode.FILE_MISSING, reason=ErrorReason.INVALID_INPUT.value, status_code=422)

    content_type = (upload.content_type or "").lower()
    if content_type in PDF_TYPES:
        return "pdf"
    if content_type in IMAGE_TYPES:
        return "image"

    raise AppError(
        code=ErrorCode.INVALID_FILE_TYPE,
        reason=ErrorReason.UNSUPPORTED_FILE.value,
        status_code=422,
        details={"content_type": content_type},
    )


def validate_size(data: bytes) -> bytes:
    if not data:
        raise AppError(code=ErrorCode.FILE_MISSING, reason=ErrorReason.INVALID_INPUT.value, message="Empty upload", status_code=422)
    if len(data) > MAX_BYTES:
        raise AppError(
            code=ErrorCode.FILE_TOO_LARGE,
            reason=ErrorReason.INVALID_INPUT.value,
            status_code=413,
            details={"max_bytes": MAX_BYTES, "size": len(data)},
        )
    return data


def validate_page_range(start: int | None, end: int | None, page_count: int) -> tuple[int, int]:
    first = start or 1
    last = end or page_count
    if first < 1 or last > page_count or first > last:
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT.value,
            message=f"Invalid page range {first}-{last} for a {page_count}-page document",
            status_code=422,
        )
    return first, last
