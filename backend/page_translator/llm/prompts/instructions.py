"""
instructions.py
- Purpose: Compose the redraw instructions sent with a page image.
- Design: one builder per TranslationMode, assembled from shared clauses so every
  clause can be checked on its own. The generation client never branches on mode;
  everything mode-specific lives in the text built here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from page_translator.constants.statuses import TranslationMode
from page_translator.schemas.page import Segment

NO_CORRECTIONS = "No corrections available from text extraction. Proceed with direct translation."


@dataclass(frozen=True)
class ScriptRule:
    name: str
    synonyms: tuple[str, ...]
    codes: tuple[str, ...]
    directive: str

    def matches(self, target_language: str) -> bool:
        lowered = (target_language or "").strip().lower()
        if not lowered:
            return False
        if any(s in lowered for s in self.synonyms):
            return True
        for token in lowered.replace("(", " ").replace(")", " ").replace(",", " ").split():
            for code in self.codes:
                if token == code or token.startswith(code + "-") or token.startswith(code + "_"):
                    return True
        return False


CHINESE_SCRIPT = ScriptRule(
    name="chinese",
    synonyms=("chinese", "mandarin", "中文", "汉语", "漢語", "简体", "繁體", "繁体", "普通话"),
    codes=("zh", "zho", "chi", "cmn"),
    directive=(
        "**CRITICAL: CHINESE LOCALIZATION**\n"
        "- Replace all Japanese Kanji/Kana or foreign script with Standard Simplified Chinese.\n"
        "- Do NOT use Japanese glyph variants. Use mainland China standard Hanzi.\n"
        "- Do NOT copy Kanji just because it looks like Chinese: '入力' becomes '输入', "
        "'手紙' becomes '信', '削除' becomes '删除'. Meaning-based translation is mandatory."
    ),
)

SCRIPT_RULES: tuple[ScriptRule, ...] = (CHINESE_SCRIPT,)


def matching_script_rules(target_language: str) -> list[ScriptRule]:
    return [r for r in SCRIPT_RULES if r.matches(target_language)]


# ----------------------------
# Shared clauses
# ----------------------------
def image_preservation_clause() -> str:
    return (
        "**IMAGE PRESERVATION RULE (MANDATORY):**\n"
        "- DO NOT TRANSLATE PICTURES: photographs, graphical logos and complex diagrams stay EXACTLY as they are.\n"
        "- Do NOT overlay translated text on top of images or graphics.\n"
        "- ONLY translate text that is part of the document's body, headings, tables, or structural layout.\n"
        "- Preserve margins, gaps and whitespace. Do not reflow or re-center text blocks."
    )


def glossary_clause(glossary: str | None) -> str:
    glossary = (glossary or "").strip()
    if not glossary:
        return "**GLOSSARY ENFORCEMENT:**\nNo glossary provided. Use standard professional terminology."
    return (
        "**GLOSSARY ENFORCEMENT:**\n"
        f"You MUST strictly use the following translations for specified terms:\n{glossary}"
    )


def trademark_clause() -> str:
    return (
        "**BRAND AND TRADEMARK PROTECTION:**\n"
        "- Brand names, product names, trademarks and logos must remain exactly as in the original. Do not translate or transliterate them."
    )


def redundancy_clause() -> str:
    return (
        "**REDUNDANCY CONSOLIDATION:**\n"
        "- If the original repeats the same content in two languages, render it once in the target language. Do not output both versions."
    )


def script_clause(target_language: str) -> str:
    return "\n\n".join(r.directive for r in matching_script_rules(target_language))


def render_mapping(segments: Iterable[Segment]) -> str:
    return "\n".join(
        f'Segment {i} [{s.location or "Text"}]: "{s.original}" => "{s.translated}"'
        for i, s in enumerate(segments, start=1)
    )


def mapping_clause(mapping: str) -> str:
    body = mapping.strip() if mapping else ""
    return "**TEXT MAPPING TO APPLY:**\n" + (body or NO_CORRECTIONS)


def feedback_clause(feedback: str | None) -> str:
    feedback = (feedback or "").strip()
    if not feedback:
        return ""
    return (
        "**CORRECTIONS REQUIRED (FEEDBACK FROM PREVIOUS ATTEMPT):**\n"
        f"{feedback}\n"
        "Fix every issue listed above in this attempt."
    )


def output_clause() -> str:
    return (
        "**Output:**\n"
        "- A single image.\n"
        "- Resolution: 4K (Pixel-Perfect).\n"
        "- Aspect Ratio: Match Original."
    )


def compose_refinement_feedback(suggestions: str | None, user_note: str | None) -> str | None:
    """Merge the last evaluation's suggestions with the user's own note."""
    parts: list[str] = []
    if suggestions and suggestions.strip():
        parts.append(f"Evaluator suggestions: {suggestions.strip()}")
    if user_note and user_note.strip():
        parts.append(f"User feedback: {user_note.strip()}")
    return "\n".join(parts) or None


# ----------------------------
# Per-mode builders
# ----------------------------
@dataclass(frozen=True)
class InstructionContext:
    target_language: str
    glossary: str | None = None
    feedback: str | None = None
    mapping: str = ""
    # Two-step requested but extraction was unusable
    degraded: bool = False


def _header(ctx: InstructionContext) -> str:
    return (
        "**Role:** Elite Localization Engine (Visual Replacement Specialist)\n"
        f'**Task:** Replace source text with: "{ctx.target_language}".'
    )


def build_direct_instructions(ctx: InstructionContext) -> str:
    direct = (
        "**DIRECT TRANSLATION INSTRUCTIONS:**\n"
        f'1. **STRICT TARGET:** Target must be 100% "{ctx.target_language}", including headers, footers, tables and index numbers.\n'
        "2. **STYLE MATCHING:** Keep the exact visual appearance (font, color, size, layout) of the original document.\n"
        "3. **ACCURACY:** High precision, natively fluent translation following the glossary above."
    )
    if ctx.degraded:
        direct += "\n\n" + mapping_clause("")
    return _join(
        _header(ctx),
        image_preservation_clause(),
        glossary_clause(ctx.glossary),
        direct,
        trademark_clause(),
        redundancy_clause(),
        script_clause(ctx.target_language),
        output_clause(),
        feedback_clause(ctx.feedback),
    )


def build_two_step_instructions(ctx: InstructionContext) -> str:
    replacement = (
        "**ENGINE MODE: PURE VISUAL REPLACEMENT**\n"
        "Use the provided mapping.\n"
        "1. **TRUST THE MAPPING:** The text below already incorporates the glossary. Apply it verbatim.\n"
        "2. **REPLACE ONLY:** Erase original text (matching background) and print translated text.\n"
        "3. **STYLE CLONING:** Match font, weight, color, and size exactly."
    )
    return _join(
        _header(ctx),
        image_preservation_clause(),
        glossary_clause(ctx.glossary),
        replacement,
        mapping_clause(ctx.mapping),
        trademark_clause(),
        redundancy_clause(),
        script_clause(ctx.target_language),
        output_clause(),
        feedback_clause(ctx.feedback),
    )


INSTRUCTION_BUILDERS: dict[TranslationMode, Callable[[InstructionContext], str]] = {
    TranslationMode.DIRECT: build_direct_instructions,
    TranslationMode.TWO_STEP: build_two_step_instructions,
}


def build_redraw_instructions(mode: TranslationMode, ctx: InstructionContext) -> str:
    return INSTRUCTION_BUILDERS[mode](ctx)


def _join(*clauses: str) -> str:
    return "\n\n".join(c for c in clauses if c)
