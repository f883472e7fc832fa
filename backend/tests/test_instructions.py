import pytest

from page_translator.constants.statuses import TranslationMode
from page_translator.llm.prompts.instructions import (
    NO_CORRECTIONS,
    CHINESE_SCRIPT,
    InstructionContext,
    build_redraw_instructions,
    compose_refinement_feedback,
    glossary_clause,
    render_mapping,
)
from page_translator.llm.prompts.registry import get_prompt
from page_translator.schemas.page import Segment


@pytest.mark.parametrize(
    "language",
    ["Chinese", "Simplified Chinese", "chinese (simplified)", "Mandarin", "zh", "zh-CN", "ZH_TW", "cmn", "中文", "简体中文"],
)
def test_chinese_synonyms_get_script_directive(language):
    assert CHINESE_SCRIPT.matches(language)
    text = build_redraw_instructions(TranslationMode.DIRECT, InstructionContext(target_language=language))
    assert "CHINESE LOCALIZATION" in text


@pytest.mark.parametrize("language", ["Spanish", "Japanese", "Zulu", "Czech", ""])
def test_other_languages_get_no_script_directive(language):
    assert not CHINESE_SCRIPT.matches(language)
    text = build_redraw_instructions(TranslationMode.DIRECT, InstructionContext(target_language=language))
    assert "CHINESE LOCALIZATION" not in text


def test_common_clauses_in_both_modes():
    ctx = InstructionContext(target_language="German", glossary="Invoice = Rechnung", mapping="Segment 1 [Text]: \"a\" => \"b\"")
    for mode in TranslationMode:
        text = build_redraw_instructions(mode, ctx)
        assert "IMAGE PRESERVATION RULE" in text
        assert "Invoice = Rechnung" in text
        assert "BRAND AND TRADEMARK PROTECTION" in text
        assert "REDUNDANCY CONSOLIDATION" in text
        assert '"German"' in text
        assert "CORRECTIONS REQUIRED" not in text


def test_glossary_fallback_text():
    assert "No glossary provided" in glossary_clause(None)
    assert "No glossary provided" in glossary_clause("   ")


def test_two_step_embeds_every_segment():
    segments = [
        Segment(original="Factura", translated="Invoice", location="Header"),
        Segment(original="Total", translated="Total amount", location="Table Row 3"),
        Segment(original="Gracias", translated="Thank you"),
    ]
    mapping = render_mapping(segments)
    assert mapping.splitlines() == [
        'Segment 1 [Header]: "Factura" => "Invoice"',
        'Segment 2 [Table Row 3]: "Total" => "Total amount"',
        'Segment 3 [Text]: "Gracias" => "Thank you"',
    ]
    text = build_redraw_instructions(TranslationMode.TWO_STEP, InstructionContext(target_language="English", mapping=mapping))
    for line in mapping.splitlines():
        assert line in text
    assert "PURE VISUAL REPLACEMENT" in text


def test_degraded_direct_carries_no_corrections_note():
    plain = build_redraw_instructions(TranslationMode.DIRECT, InstructionContext(target_language="French"))
    degraded = build_redraw_instructions(TranslationMode.DIRECT, InstructionContext(target_language="French", degraded=True))
    assert NO_CORRECTIONS not in plain
    assert NO_CORRECTIONS in degraded
    assert "DIRECT TRANSLATION INSTRUCTIONS" in degraded


def test_feedback_appended_when_present():
    text = build_redraw_instructions(
        TranslationMode.DIRECT,
        InstructionContext(target_language="French", feedback="Keep the logo"),
    )
    assert "CORRECTIONS REQUIRED" in text
    assert text.rstrip().endswith("Fix every issue listed above in this attempt.")
    assert "Keep the logo" in text


def test_compose_refinement_feedback():
    assert compose_refinement_feedback(None, None) is None
    assert compose_refinement_feedback("  ", "") is None
    assert compose_refinement_feedback("missing footer text", None) == "Evaluator suggestions: missing footer text"
    assert compose_refinement_feedback(None, "use formal tone") == "User feedback: use formal tone"
    combined = compose_refinement_feedback("missing footer text", "use formal tone")
    assert combined == "Evaluator suggestions: missing footer text\nUser feedback: use formal tone"


def test_prompt_templates_render_without_placeholders():
    extract = get_prompt("extract_segments", "v1").render(
        {"source_language": "Spanish", "target_language": "English", "glossary_clause": "", "feedback_clause": None}
    )
    audit = get_prompt("audit_page", "v1").render(
        {
            "source_language": "Spanish",
            "target_language": "English",
            "glossary_line": "",
            "criteria": "- accuracy",
            "feedback_language": "English",
        }
    )
    assert "{{" not in extract
    assert "{{" not in audit
    assert "Spanish" in extract and "English" in audit


def test_unknown_prompt_raises():
    with pytest.raises(KeyError):
        get_prompt("does_not_exist", "v1")
