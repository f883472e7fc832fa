# page_translator/llm/prompts/templates.py

EXTRACT_SEGMENTS_V1 = """
Role: Senior Optical Character Recognition (OCR) and Translation Expert.
Task: Analyze the image and extract text segments for translation.

1. Identify text in: {{source_language}}.
2. Translate it to: {{target_language}}.

GLOSSARY PROTOCOL (CRITICAL):
{{glossary_clause}}

IMAGE PRESERVATION RULE (STRICT):
- Do NOT extract or translate text that is embedded inside graphical images, photographs, illustrations, or complex technical diagrams.
- ONLY extract body text, headings, footers, and text inside data tables.
- If a segment of text is part of a "picture", skip it entirely.

BRAND AND TRADEMARK RULE:
- Brand names, product names, trademarks and logos stay exactly as written. Copy them into "translated" unchanged.

COMPLETENESS PROTOCOL:
- Extract all document-level text (headers, body, footnotes), in reading order.
- If it is part of the document structure (and not a nested image), EXTRACT IT.

QUALITY STANDARDS:
1. Accuracy: Preserve exact meaning.
2. Fluency: Native-level phrasing.
3. Consistency: Terminology must be uniform.

Return STRICT JSON only: an array of objects with keys "original", "translated", "location".

{{feedback_clause}}
""".strip()


AUDIT_PAGE_V1 = """
Professional Translation Quality Audit.
The first image is the ORIGINAL page. The second image is the TRANSLATED page.

- Source Language: {{source_language}}
- Target Language: {{target_language}}
{{glossary_line}}

Score each criterion from 0 to 10:
{{criteria}}

SCORING CARVE-OUTS (DO NOT PENALIZE):
- Brand names, product names and trademarks left untranslated are CORRECT. Never lower accuracy, completeness or terminology for them.
- Bilingual content that the original repeats in two languages may be consolidated into a single target-language version. This is CORRECT and must not lower completeness.

IMAGE PRESERVATION CHECK:
- If text inside an embedded photograph or a graphical illustration WAS translated, decrease the completeness and format_preservation scores. Images are expected to be UNTOUCHED.

Return STRICT JSON only with keys "scores", "reason", "suggestions".
Write "reason" and "suggestions" in {{feedback_language}}.
""".strip()
