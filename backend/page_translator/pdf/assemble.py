"""page_translator/pdf/assemble.py

Images -> PDF documents (translated pages, side-by-side comparison, evaluation report).
Every image is fitted to the page, centered, with its aspect ratio preserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import fitz  # PyMuPDF

from page_translator.images import image_dimensions, parse_data_url
from page_translator.schemas.evaluation import EvaluationScores
from page_translator.schemas.page import PageRecord

A4_PORTRAIT = (595.0, 842.0)  # points
A4_LANDSCAPE = (842.0, 595.0)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    def to_rect(self) -> fitz.Rect:
        return fitz.Rect(self.x, self.y, self.x + self.width, self.y + self.height)


def fit_centered(img_w: float, img_h: float, area: Box) -> Box:
    """Largest box with the image's aspect ratio that fits `area`, centered (letterboxed)."""
    if img_w <= 0 or img_h <= 0:
        return area
    scale = min(area.width / img_w, area.height / img_h)
    w, h = img_w * scale, img_h * scale
    return Box(area.x + (area.width - w) / 2, area.y + (area.height - h) / 2, w, h)


def _place(page: fitz.Page, data_url: str, area: Box) -> None:
    image = parse_data_url(data_url)
    w, h = image_dimensions(image)
    page.insert_image(fit_centered(w, h, area).to_rect(), stream=image.data, keep_proportion=True)


def build_translated_pdf(images: Sequence[str], *, page_size: tuple[float, float] = A4_PORTRAIT) -> bytes:
    doc = fitz.open()
    try:
        for data_url in images:
            page = doc.new_page(width=page_size[0], height=page_size[1])
            _place(page, data_url, Box(0, 0, page_size[0], page_size[1]))
        return doc.tobytes()
    finally:
        doc.close()


def build_comparison_pdf(
    pairs: Sequence[tuple[str, str]],
    *,
    margin: float = 20.0,
    gap: float = 10.0,
) -> bytes:
    """Landscape A4, original on the left and translation on the right."""
    width, height = A4_LANDSCAPE
    half = (width - 2 * margin - gap) / 2
    label_h = 14.0
    doc = fitz.open()
    try:
        for original, translated in pairs:
            page = doc.new_page(width=width, height=height)
            page.insert_text((margin, margin + 10), "Original", fontsize=10)
            page.insert_text((margin + half + gap, margin + 10), "Translated", fontsize=10)
            top = margin + label_h
            _place(page, original, Box(margin, top, half, height - top - margin))
            _place(page, translated, Box(margin + half + gap, top, half, height - top - margin))
        return doc.tobytes()
    finally:
        doc.close()


def build_evaluation_pdf(pages: Sequence[PageRecord], *, title: str = "Translation Quality Report") -> bytes:
    """Summary table of scores, then one section per page with reason and suggestions."""
    width, height = A4_LANDSCAPE
    margin = 36.0
    dims = EvaluationScores.dimensions()
    columns = ["Page", "Avg", *[d.replace("_", " ")[:12] for d in dims]]
    col_w = (width - 2 * margin) / len(columns)
    row_h = 16.0

    doc = fitz.open()
    try:
        page = doc.new_page(width=width, height=height)
        page.insert_text((margin, margin), title, fontsize=16)
        y = margin + 28
        for i, col in enumerate(columns):
            page.insert_text((margin + i * col_w, y), col, fontsize=8)
        y += row_h

        evaluated = [p for p in pages if p.evaluation is not None]
        for p in evaluated:
            if y > height - margin:
                page = doc.new_page(width=width, height=height)
                y = margin
            ev = p.evaluation
            cells = [str(p.page_number), f"{ev.average_score:.1f}", *[f"{v:g}" for v in ev.scores.values()]]
            for i, cell in enumerate(cells):
                page.insert_text((margin + i * col_w, y), cell, fontsize=9)
            y += row_h

        for p in evaluated:
            page = doc.new_page(width=width, height=height)
            page.insert_text((margin, margin), f"Page {p.page_number}: {p.evaluation.average_score:.1f} / 10", fontsize=14)
            body = f"Reason:\n{p.evaluation.reason}\n\nSuggestions:\n{p.evaluation.suggestions or '-'}"
            page.insert_textbox(fitz.Rect(margin, margin + 20, width - margin, height - margin), body, fontsize=10)
        return doc.tobytes()
    finally:
        doc.close()
