"""Turn a raw model response into publishable Markdown."""

from __future__ import annotations

from resumake.clients.llm_client import FinishReason, GenerationResponse
from resumake.output.markdown import MarkdownValidationError, prepare_for_output


class ResponseProcessingError(ValueError):
    """Raised when a response cannot be turned into a resume."""


FINISH_REASON_MESSAGES: dict[FinishReason, str] = {
    FinishReason.MAX_OUTPUT_LENGTH: (
        "response was truncated because it reached maximum token limit; "
        "try simplifying your input"
    ),
    FinishReason.SAFETY_BLOCKED: (
        "Content was blocked due to safety filters. "
        "Consider reviewing your input for potentially sensitive or inappropriate content."
    ),
    FinishReason.RECITATION: (
        "response was filtered due to content repetition; "
        "try adding more variation to your input"
    ),
    FinishReason.OTHER: "generation did not complete successfully: unknown reason",
}


def process_response(response: GenerationResponse | None) -> str:
    """Return validated, normalized Markdown or raise ResponseProcessingError."""
    if response is None:
        raise ResponseProcessingError("response cannot be empty")

    if response.finish_reason is not FinishReason.STOP:
        raise ResponseProcessingError(FINISH_REASON_MESSAGES[response.finish_reason])

    if not response.text.strip():
        raise ResponseProcessingError("no content in response")

    try:
        return prepare_for_output(response.text)
    except MarkdownValidationError as exc:
        raise ResponseProcessingError(f"invalid markdown content: {exc}") from exc
