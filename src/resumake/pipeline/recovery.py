"""Salvage partial output when generation stops at the length limit."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from resumake.clients.llm_client import FinishReason, GenerationResponse
from resumake.output.markdown import normalize_markdown

logger = logging.getLogger(__name__)

TRUNCATION_WARNING = "Warning: Response was truncated due to token limit"
TRUNCATION_NOTICE = (
    "\n\n---\n\n"
    "**Note: This content was truncated due to reaching the maximum token limit. "
    "The resume may be incomplete.**"
)


class RecoveryError(ValueError):
    """Raised when no usable partial content can be extracted."""


@dataclass
class RecoveryResult:
    ok: bool
    content: str = ""
    notice: str = ""
    error: str = ""


def is_recoverable(response: GenerationResponse | None) -> bool:
    return response is not None and response.finish_reason is FinishReason.MAX_OUTPUT_LENGTH


def recover_partial_content(response: GenerationResponse | None) -> str:
    """Return the text produced before the cutoff with the truncation notice appended."""
    if response is None:
        raise RecoveryError("response cannot be empty")
    if response.finish_reason is not FinishReason.MAX_OUTPUT_LENGTH:
        raise RecoveryError(
            "can only recover partial content from token limit truncation, "
            f"not {response.finish_reason.value}"
        )
    text = response.text.strip()
    if not text:
        raise RecoveryError("no content in response")
    return normalize_markdown(text) + TRUNCATION_NOTICE


def apply_truncation_recovery(
    response: GenerationResponse | None,
    processing_error: Exception,
) -> RecoveryResult:
    """Decide the outcome of a failed processing step.

    Only a length-limit stop is recoverable. Any failure keeps the original
    processing error in the message alongside the recovery failure.
    """
    if not is_recoverable(response):
        return RecoveryResult(
            ok=False, error=f"error processing API response: {processing_error}"
        )

    try:
        content = recover_partial_content(response)
    except RecoveryError as exc:
        logger.warning("Truncated response could not be recovered: %s", exc)
        return RecoveryResult(
            ok=False,
            error=(
                f"error processing API response: {processing_error} "
                f"(recovery failed: {exc})"
            ),
        )

    logger.info("Recovered %d chars from truncated response", len(content))
    return RecoveryResult(ok=True, content=content, notice=TRUNCATION_WARNING)
