"""Prompt templating helpers for the two chat stages."""
from __future__ import annotations

from codegen_relay.common.schema import GenerationRequest

PROMPT_ENGINEER_SYSTEM = (
    "You are a prompt engineer specializing in code generation. Create clear, concise, "
    "and effective prompts for AI code generation based on user requirements."
)

CODER_SYSTEM = (
    "You are an expert programmer. Generate clean, efficient, and well-commented code "
    "based on the provided requirements."
)

REFINE_TEMPLATE = """Create a prompt for generating code with these requirements:
- Programming language: {{language}}
- Task type: {{task_type}}
- User description: {{prompt}}

Return only the prompt text without any additional explanation."""


def render_prompt(template: str, **values: str) -> str:
    """
    Render values into a template.

    Args:
        template: Template content containing {{name}} placeholders.
        values: Replacement text keyed by placeholder name.

    Returns:
        Rendered prompt.
    """
    out = template
    for name, value in values.items():
        out = out.replace("{{" + name + "}}", value)
    return out


def refinement_messages(request: GenerationRequest) -> list[dict[str, str]]:
    user = render_prompt(
        REFINE_TEMPLATE,
        language=request.language,
        task_type=request.task_type,
        prompt=request.prompt,
    )
    return [
        {"role": "system", "content": PROMPT_ENGINEER_SYSTEM},
        {"role": "user", "content": user},
    ]


def coder_messages(refined_prompt: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": CODER_SYSTEM},
        {"role": "user", "content": refined_prompt},
    ]
