# prompter/llm/prompts/registry.py

from dataclasses import dataclass

from prompter.llm.prompts import templates

@dataclass(frozen=True)
class PromptTemplate:
    name: str
    version: str
    template: str

PROMPTS: dict[tuple[str, str], PromptTemplate] = {
    ("improve", "v1"): PromptTemplate("improve", "v1", templates.IMPROVE_SYSTEM_V1),
    ("short", "v1"): PromptTemplate("short", "v1", templates.SHORT_SYSTEM_V1),
    ("long", "v1"): PromptTemplate("long", "v1", templates.LONG_SYSTEM_V1),
    ("variants", "v1"): PromptTemplate("variants", "v1", templates.VARIANTS_SYSTEM_V1),
    ("user_improve", "v1"): PromptTemplate("user_improve", "v1", templates.IMPROVE_USER_V1),
    ("user_plain", "v1"): PromptTemplate("user_plain", "v1", templates.PLAIN_USER_V1),
}

DEFAULT_SYSTEM_PROMPT = "improve"

def get_prompt(name: str, version: str = "v1") -> PromptTemplate:
    key = (name, version)
    if key not in PROMPTS:
        raise KeyError(f"Unknown prompt: {name}@{version}")
    return PROMPTS[key]


def render_template(template: str, variables: dict) -> str:
    out = template
    for k, v in variables.items():
        out = out.replace("{{" + k + "}}", str(v))
    return out
