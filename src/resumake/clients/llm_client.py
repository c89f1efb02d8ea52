"""Claude API wrapper used for resume generation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

import anthropic

logger = logging.getLogger(__name__)

API_KEY_ENV = "ANTHROPIC_API_KEY"


class FinishReason(str, Enum):
    STOP = "stop"
    MAX_OUTPUT_LENGTH = "max_output_length"
    SAFETY_BLOCKED = "safety_blocked"
    RECITATION = "recitation"
    OTHER = "other"


_STOP_REASONS: dict[str | None, FinishReason] = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "max_tokens": FinishReason.MAX_OUTPUT_LENGTH,
    "refusal": FinishReason.SAFETY_BLOCKED,
}


class GenerationAPIError(RuntimeError):
    """Raised when the remote call itself fails (auth, quota, network, ...)."""


@dataclass
class GenerationResponse:
    """Response from the LLM including usage metadata."""

    text: str
    finish_reason: FinishReason
    input_tokens: int = 0
    output_tokens: int = 0


def get_api_key() -> str:
    """Return the API key from the environment or raise ValueError."""
    api_key = os.environ.get(API_KEY_ENV, "").strip()
    if not api_key:
        raise ValueError(f"{API_KEY_ENV} environment variable is required")
    return api_key


def check_api_key() -> bool:
    try:
        get_api_key()
    except ValueError:
        return False
    return True


def map_stop_reason(stop_reason: str | None) -> FinishReason:
    return _STOP_REASONS.get(stop_reason, FinishReason.OTHER)


def describe_api_error(exc: Exception) -> str:
    """Phrase an SDK exception so the error analyzer can categorise it."""
    if isinstance(exc, anthropic.RateLimitError):
        return (
            f"API quota or rate limit exceeded: {exc}. "
            "Please wait a few minutes and retry, or check your usage limits"
        )
    if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return (
            f"API authentication error: {exc}. "
            f"Please verify your {API_KEY_ENV} environment variable is correct and valid"
        )
    if isinstance(exc, anthropic.APITimeoutError):
        return f"network error while contacting API: request timeout ({exc})"
    if isinstance(exc, anthropic.APIConnectionError):
        return (
            f"network error while contacting API: connection failed ({exc}). "
            "Please check your internet connection and try again"
        )
    if isinstance(exc, anthropic.BadRequestError):
        return f"invalid request to API: {exc}. Please check the format of your prompt"
    return f"error generating content: {exc}"


class LLMClient:
    """Async Claude API client. Retrying is left to the user."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> GenerationResponse:
        """Send a prompt to Claude and return the text, finish reason and usage."""
        logger.debug("LLM call: model=%s, max_tokens=%d", model, max_tokens)
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        try:
            message = await self.client.messages.create(**kwargs)
        except anthropic.APIError as exc:
            logger.error("LLM call failed", exc_info=True)
            raise GenerationAPIError(describe_api_error(exc)) from exc

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug(
            "LLM response: %d input, %d output tokens, stop_reason=%s",
            input_tokens,
            output_tokens,
            message.stop_reason,
        )
        return GenerationResponse(
            text=text,
            finish_reason=map_stop_reason(message.stop_reason),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def aclose(self) -> None:
        """Release the underlying HTTP transport."""
        await self.client.close()
