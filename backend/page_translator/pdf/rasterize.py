"""page_translator/pdf/rasterize.py

PDF -> one raster image per page, with PyMuPDF (fitz).
"""

import fitz  # PyMuPDF

from page_translator.core import AppError, ErrorCode, ErrorReason
from page_translator.images import to_data_url


def _open(pdf_bytes: bytes) -> fitz.Document:
    if not pdf_bytes:
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT.value,
            message="Empty PDF bytes",
            status_code=400,
        )
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:  # MuPDF raises its own error types for undecodable data
        raise AppError(
            code=ErrorCode.PDF_INVALID,
            reason=ErrorReason.PDF_INVALID.value,
            message=f"Could not open PDF: {e}",
            status_code=422,
        ) from e
    if doc.page_count == 0:
        doc.close()
        raise AppError(
            code=ErrorCode.PDF_INVALID,
            reason=ErrorReason.PDF_INVALID.value,
            message="PDF has no pages",
            status_code=422,
        )
    return doc


def get_page_count(pdf_bytes: bytes) -> int:
    doc = _open(pdf_bytes)
    try:
        return doc.page_count
    finally:
        doc.close()


def render_pages(
    pdf_bytes: bytes,
    *,
    start: int | None = None,
    end: int | None = None,
    scale: float = 2.0,
) -> list[str]:
    """Render pages `start`..`end` (1-based, inclusive, clamped) as PNG data URLs."""
    doc = _open(pdf_bytes)
    try:
        first = max(1, start or 1)
        last = min(doc.page_count, end or doc.page_count)
        matrix = fitz.Matrix(scale, scale)
        out: list[str] = []
        for i in range(first - 1, last):
            pix = doc.load_page(i).get_pixmap(matrix=matrix, alpha=False)
            out.append(to_data_url(pix.tobytes("png"), "image/png"))
        return out
    finally:
        doc.close()
