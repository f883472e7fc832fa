"""
images.py
- Purpose: data-URL helpers, pixel dimensions and output aspect-ratio snapping.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

import fitz  # PyMuPDF

from page_translator.core import AppError, ErrorCode, ErrorReason
from page_translator.llm.types import ImagePart


@dataclass(frozen=True)
class AspectRatio:
    label: str
    value: float


SUPPORTED_ASPECT_RATIOS: tuple[AspectRatio, ...] = (
    AspectRatio("1:1", 1.0),
    AspectRatio("3:4", 3 / 4),
    AspectRatio("4:3", 4 / 3),
    AspectRatio("9:16", 9 / 16),
    AspectRatio("16:9", 16 / 9),
)


def snap_aspect_ratio(
    width: float,
    height: float,
    supported: tuple[AspectRatio, ...] = SUPPORTED_ASPECT_RATIOS,
) -> str:
    """Nearest supported ratio by absolute difference; earlier entries win ties."""
    if width <= 0 or height <= 0:
        return supported[0].label
    target = width / height
    best = supported[0]
    best_diff = abs(target - best.value)
    for ratio in supported[1:]:
        diff = abs(target - ratio.value)
        if diff < best_diff:
            best, best_diff = ratio, diff
    return best.label


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def parse_data_url(data_url: str) -> ImagePart:
    """Split `data:<mime>;base64,<payload>` into an ImagePart.

    A bare base64 payload (no header) is accepted and treated as JPEG.
    """
    raw = (data_url or "").strip()
    mime_type = "image/jpeg"
    payload = raw
    if raw.startswith("data:"):
        header, _, payload = raw.partition(",")
        mime_type = header[len("data:"):].split(";")[0] or mime_type
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT.value,
            message="Image is not valid base64 data",
            status_code=422,
        ) from e
    if not data:
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT.value,
            message="Image is empty",
            status_code=422,
        )
    return ImagePart(mime_type=mime_type, data=data)


def image_dimensions(image: ImagePart) -> tuple[int, int]:
    try:
        pix = fitz.Pixmap(image.data)
    except Exception as e:  # MuPDF raises its own error types for undecodable data
        raise AppError(
            code=ErrorCode.VALIDATION_ERROR,
            reason=ErrorReason.INVALID_INPUT.value,
            message=f"Unreadable image: {e}",
            status_code=422,
        ) from e
    return pix.width, pix.height
