"""Prompt text sent to the model."""

from __future__ import annotations

SYSTEM_PROMPT = """\
You are an expert resume writing assistant. Your goal is to synthesize the \
provided existing resume information (if any) and the raw stream-of-consciousness \
input into a single, coherent, professional resume formatted strictly in Markdown.

Rules:
- Prioritize clarity, conciseness, and professional language.
- Structure the output with clear headings (e.g. Summary, Experience, Projects, Skills, Education).
- Infer structure and dates where possible, but never fabricate information that is not in the inputs.
- Focus on elevating the user's actual experience.
- Output only the Markdown resume, with no commentary before or after it."""

NO_SOURCE_PLACEHOLDER = "(No existing resume provided)"
NO_INPUT_PLACEHOLDER = "(No additional input provided)"


def build_prompt(source_content: str, user_input: str) -> str:
    """Combine the existing resume and the user's notes into one prompt."""
    source = source_content.strip() or NO_SOURCE_PLACEHOLDER
    notes = user_input.strip() or NO_INPUT_PLACEHOLDER
    return f"EXISTING RESUME:\n{source}\n\nUSER INPUT:\n{notes}"
