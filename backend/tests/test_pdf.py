import fitz
import pytest

from conftest import png_data_url
from page_translator.core import AppError, ErrorCode
from page_translator.pdf.assemble import (
    Box,
    build_comparison_pdf,
    build_evaluation_pdf,
    build_translated_pdf,
    fit_centered,
)
from page_translator.images import image_dimensions, parse_data_url
from page_translator.pdf.rasterize import get_page_count, render_pages
from page_translator.schemas.evaluation import EvaluationResult, EvaluationScores
from page_translator.schemas.page import PageRecord
from page_translator.constants.statuses import PageStatus


def _pdf(pages: int) -> bytes:
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=200, height=300)
        page.insert_text((20, 40), f"Page {i + 1}")
    data = doc.tobytes()
    doc.close()
    return data


def test_fit_centered_letterboxes_wide_image():
    box = fit_centered(200, 100, Box(0, 0, 100, 100))
    assert box == Box(0, 25, 100, 50)


def test_fit_centered_pillarboxes_tall_image():
    box = fit_centered(100, 400, Box(10, 10, 100, 100))
    assert box.width == pytest.approx(25)
    assert box.height == pytest.approx(100)
    assert box.x == pytest.approx(47.5)
    assert box.y == pytest.approx(10)


def test_render_pages_range_is_one_based_and_inclusive():
    pdf = _pdf(4)
    assert get_page_count(pdf) == 4
    pages = render_pages(pdf, start=2, end=3, scale=1.0)
    assert len(pages) == 2
    assert all(p.startswith("data:image/png;base64,") for p in pages)


def test_render_pages_scale_changes_resolution():
    [big] = render_pages(_pdf(1), scale=2.0)
    assert image_dimensions(parse_data_url(big)) == (400, 600)


def test_invalid_pdf_is_rejected():
    with pytest.raises(AppError) as exc:
        get_page_count(b"definitely not a pdf")
    assert exc.value.code == ErrorCode.PDF_INVALID

    with pytest.raises(AppError):
        get_page_count(b"")


def test_translated_pdf_has_one_page_per_image():
    data = build_translated_pdf([png_data_url(30, 40), png_data_url(40, 30), png_data_url(10, 10)])
    doc = fitz.open(stream=data, filetype="pdf")
    assert doc.page_count == 3
    assert len(doc.load_page(0).get_images()) == 1


def test_comparison_pdf_places_two_images_per_page():
    pair = (png_data_url(30, 40), png_data_url(30, 40))
    doc = fitz.open(stream=build_comparison_pdf([pair, pair]), filetype="pdf")
    assert doc.page_count == 2
    assert doc.load_page(0).rect.width > doc.load_page(0).rect.height
    assert "Original" in doc.load_page(0).get_text()


def test_evaluation_pdf_has_summary_and_detail_pages():
    ev = EvaluationResult(
        scores=EvaluationScores(**{d: 7 for d in EvaluationScores.dimensions()}),
        reason="Mostly accurate",
        suggestions="Fix footer",
    )
    pages = [
        PageRecord(page_number=n, original_image="x", status=PageStatus.DONE, evaluation=ev) for n in (1, 2)
    ]
    doc = fitz.open(stream=build_evaluation_pdf(pages), filetype="pdf")
    assert doc.page_count == 3
    assert "Translation Quality Report" in doc.load_page(0).get_text()
    assert "Fix footer" in doc.load_page(1).get_text()
