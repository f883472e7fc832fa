import json

import pytest

from page_translator.constants.statuses import PageStatus, TranslationMode
from page_translator.core import AppError, ErrorCode
from page_translator.schemas.evaluation import EvaluationResult
from page_translator.schemas.page import PageRecord, Segment, TranslationSettings
from page_translator.services.project_store import PROJECT_VERSION, dump_project, load_project

SETTINGS = TranslationSettings(target_language="Chinese", mode=TranslationMode.TWO_STEP, glossary="A = B")


def test_project_keeps_pages_and_settings():
    pages = [
        PageRecord(
            page_number=1,
            original_image="data:image/png;base64,AAAA",
            translated_image="data:image/png;base64,BBBB",
            status=PageStatus.DONE,
            evaluation=EvaluationResult.unavailable(),
            segments=[Segment(original="a", translated="b")],
            attempt_id="abc",
        ),
        PageRecord(page_number=2, original_image="data:image/png;base64,CCCC"),
    ]

    doc = load_project(dump_project(pages, SETTINGS, document_name="brochure"))

    assert doc.version == PROJECT_VERSION
    assert doc.document_name == "brochure"
    assert doc.settings == SETTINGS
    assert doc.pages == pages


def test_unknown_version_is_rejected():
    raw = json.loads(dump_project([], None))
    raw["version"] = 99
    with pytest.raises(AppError) as exc:
        load_project(json.dumps(raw))
    assert exc.value.code == ErrorCode.PROJECT_VERSION_UNSUPPORTED


def test_garbage_is_rejected_with_details():
    with pytest.raises(AppError) as exc:
        load_project('{"pages": [{"page_number": 0}]}')
    assert exc.value.code == ErrorCode.PROJECT_INVALID
    assert exc.value.details["errors"]


def test_duplicate_pages_are_rejected():
    page = PageRecord(page_number=1, original_image="x")
    with pytest.raises(AppError):
        load_project(dump_project([page, page], None))
