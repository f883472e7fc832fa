# page_translator/llm/prompts/registry.py

from dataclasses import dataclass

from page_translator.llm.prompts import templates

@dataclass(frozen=True)
class PromptTemplate:
    name: str
    version: str
    template: str

    def render(self, variables: dict) -> str:
        out = self.template
        for k, v in variables.items():
            out = out.replace("{{" + k + "}}", "" if v is None else str(v))
        return out.strip()

PROMPTS: dict[tuple[str, str], PromptTemplate] = {
    ("extract_segments", "v1"): PromptTemplate("extract_segments", "v1", templates.EXTRACT_SEGMENTS_V1),
    ("audit_page", "v1"): PromptTemplate("audit_page", "v1", templates.AUDIT_PAGE_V1),
}

def get_prompt(name: str, version: str) -> PromptTemplate:
    key = (name, version)
    if key not in PROMPTS:
        raise KeyError(f"Unknown prompt: {name}@{version}")
    return PROMPTS[key]
