# attendance_ocr/llm/prompts/registry.py

from dataclasses import dataclass

from attendance_ocr.llm.prompts import templates

@dataclass(frozen=True)
class PromptTemplate:
    name: str
    version: str
    template: str

PROMPTS: dict[tuple[str, str], PromptTemplate] = {
    ("parse_attendance", "v1"): PromptTemplate("parse_attendance", "v1", templates.PARSE_ATTENDANCE_V1),
}

def get_prompt(name: str, version: str) -> PromptTemplate:
    key = (name, version)
    if key not in PROMPTS:
        raise KeyError(f"Unknown prompt: {name}@{version}")
    return PROMPTS[key]


def render_template(template: str, variables: dict) -> str:
    out = template
    for k, v in variables.items():
        out = out.replace("{{" + k + "}}", str(v))
    return out
