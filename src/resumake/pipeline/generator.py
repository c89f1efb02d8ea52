"""Resume generation pipeline: prompt -> model -> Markdown -> file."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from resumake.clients.llm_client import GenerationAPIError, GenerationResponse, LLMClient
from resumake.logging.models import UsageLog
from resumake.logging.usage_store import UsageStore
from resumake.output.writer import OutputDirectoryError, OutputWriteError, write_output
from resumake.pipeline.prompt import SYSTEM_PROMPT, build_prompt
from resumake.pipeline.recovery import apply_truncation_recovery, is_recoverable
from resumake.pipeline.response import ResponseProcessingError, process_response

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


@dataclass
class GenerationOutcome:
    """Result of one generation attempt, success or failure."""

    ok: bool
    content: str = ""
    output_path: str = ""
    truncation_notice: str = ""
    error: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


class ResumeGenerator:
    """Builds the prompt, calls the model, post-processes and writes the result."""

    def __init__(
        self,
        *,
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.7,
        max_tokens: int = 8192,
        default_output_path: str = "resume_out.md",
        usage_store: UsageStore | None = None,
        session_id: str = "anonymous",
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.default_output_path = default_output_path
        self.usage_store = usage_store
        self.session_id = session_id

    async def run(
        self,
        llm: LLMClient,
        source_content: str,
        user_input: str,
        output_path: str = "",
        *,
        on_progress: ProgressCallback | None = None,
    ) -> GenerationOutcome:
        """Run the whole pipeline.

        Expected failures come back as an unsuccessful GenerationOutcome;
        cancellation propagates.
        """
        start = time.monotonic()

        def _notify(step: str, message: str) -> None:
            if on_progress:
                on_progress(step, message)

        _notify("1 of 4", "Building prompt from your inputs...")
        prompt = build_prompt(source_content, user_input)

        _notify("2 of 4", "Sending request to Claude...")
        response: GenerationResponse | None = None
        try:
            response = await llm.generate(
                prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except GenerationAPIError as exc:
            outcome = GenerationOutcome(ok=False, error=f"error executing API request: {exc}")
            return await self._finish(outcome, source_content, user_input, start)

        _notify("3 of 4", "Processing AI response...")
        notice = ""
        try:
            content = process_response(response)
        except ResponseProcessingError as exc:
            if is_recoverable(response):
                _notify("3 of 4", "Handling truncated response...")
            recovered = apply_truncation_recovery(response, exc)
            if not recovered.ok:
                outcome = GenerationOutcome(
                    ok=False,
                    error=recovered.error,
                    input_tokens=response.input_tokens,
                    output_tokens=response.output_tokens,
                )
                return await self._finish(outcome, source_content, user_input, start)
            content = recovered.content
            notice = recovered.notice

        _notify("4 of 4", "Saving generated resume to file...")
        try:
            written = await asyncio.to_thread(
                write_output, content, output_path or self.default_output_path
            )
        except OutputWriteError as exc:
            if isinstance(exc, OutputDirectoryError):
                error = f"error preparing output directory: {exc}"
            else:
                error = f"error writing output file: {exc}"
            outcome = GenerationOutcome(
                ok=False,
                error=error,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
            )
            return await self._finish(outcome, source_content, user_input, start)

        _notify("Complete", "Resume generation completed successfully!")
        outcome = GenerationOutcome(
            ok=True,
            content=content,
            output_path=written,
            truncation_notice=notice,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )
        return await self._finish(outcome, source_content, user_input, start)

    async def _finish(
        self,
        outcome: GenerationOutcome,
        source_content: str,
        user_input: str,
        start: float,
    ) -> GenerationOutcome:
        elapsed = time.monotonic() - start
        if outcome.ok:
            logger.info("Generation succeeded in %.1fs", elapsed)
        else:
            logger.warning("Generation failed after %.1fs: %s", elapsed, outcome.error)

        if self.usage_store is not None:
            log = UsageLog(
                session_id=self.session_id,
                model=self.model,
                output_path=outcome.output_path or None,
                source_chars=len(source_content),
                input_chars=len(user_input),
                output_chars=len(outcome.content),
                elapsed_seconds=elapsed,
                total_input_tokens=outcome.input_tokens,
                total_output_tokens=outcome.output_tokens,
                truncated=bool(outcome.truncation_notice),
                success=outcome.ok,
                error_message=outcome.error or None,
            )
            try:
                await asyncio.to_thread(self.usage_store.save_log, log)
            except Exception:
                logger.warning("Failed to save usage log", exc_info=True)
        return outcome
