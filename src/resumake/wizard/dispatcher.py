"""Runs commands emitted by the state machine as asyncio tasks.

Every command produces at most one event, posted back through ``post``;
the dispatcher never touches the session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from resumake.clients.lifecycle import ClientLifecycle
from resumake.models.commands import (
    CancelGeneration,
    CloseClient,
    Command,
    EmitProgress,
    FocusField,
    GenerateResume,
    Quit,
    ReadSourceFile,
    SubmitUserInput,
    Tick,
)
from resumake.models.events import (
    Event,
    FileReadCompleted,
    GenerationCompleted,
    ProgressUpdated,
    TickElapsed,
    UserInputFinished,
)
from resumake.parsers.source_reader import SourceFileError, read_source_file
from resumake.pipeline.generator import ResumeGenerator

logger = logging.getLogger(__name__)

Post = Callable[[Event], None]
FileReader = Callable[[str], str]


class CommandDispatcher:
    """Executes commands out of band and feeds their results back as events."""

    def __init__(
        self,
        post: Post,
        lifecycle: ClientLifecycle,
        generator: ResumeGenerator,
        *,
        read_file: FileReader = read_source_file,
        tick_interval: float = 0.1,
        cancelled: asyncio.Event | None = None,
    ):
        self.post = post
        self.lifecycle = lifecycle
        self.generator = generator
        self.read_file = read_file
        self.tick_interval = tick_interval
        self.cancelled = cancelled or asyncio.Event()
        self.focused_field = ""
        self.quit_requested = False
        self._tasks: set[asyncio.Task] = set()
        # client release is never cancelled
        self._cleanup: set[asyncio.Task] = set()
        self._generation: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, command: Command) -> asyncio.Task | None:
        """Schedule a command. Must be called from the running event loop."""
        if isinstance(command, FocusField):
            self.focused_field = command.name
            return None
        if isinstance(command, Quit):
            self.quit_requested = True
            self.cancel()
            return None
        if isinstance(command, CancelGeneration):
            self.cancel_generation()
            return None
        if self.cancelled.is_set() and not isinstance(command, CloseClient):
            logger.debug("Session cancelled, dropping %r", command)
            return None

        task = asyncio.get_running_loop().create_task(self._execute(command))
        tasks = self._cleanup if isinstance(command, CloseClient) else self._tasks
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        if isinstance(command, GenerateResume):
            self._generation = task
        return task

    def cancel(self) -> None:
        """Fire the session-wide cancellation signal and abort in-flight work."""
        self.cancelled.set()
        for task in list(self._tasks):
            task.cancel()

    def cancel_generation(self) -> None:
        """Abort the in-flight generation, if any. It posts no result."""
        task, self._generation = self._generation, None
        if task is not None and not task.done():
            logger.info("Cancelling in-flight generation")
            task.cancel()

    async def shutdown(self) -> None:
        """Cancel outstanding work and make sure the client is released."""
        self.cancel()
        outstanding = self._tasks | self._cleanup
        if outstanding:
            await asyncio.gather(*outstanding, return_exceptions=True)
        await self.lifecycle.close()

    async def _execute(self, command: Command) -> None:
        if isinstance(command, ReadSourceFile):
            self._post(await self._read_source(command.path))
        elif isinstance(command, SubmitUserInput):
            self._post(UserInputFinished(content=command.content))
        elif isinstance(command, EmitProgress):
            self._post(ProgressUpdated(step=command.step, message=command.message))
        elif isinstance(command, GenerateResume):
            self._post(await self._generate(command))
        elif isinstance(command, Tick):
            await asyncio.sleep(self.tick_interval)
            self._post(TickElapsed())
        elif isinstance(command, CloseClient):
            await self.lifecycle.close()
        else:
            logger.warning("No handler for command %r", command)

    def _post(self, event: Event) -> None:
        if self.cancelled.is_set():
            return
        self.post(event)

    async def _read_source(self, path: str) -> FileReadCompleted:
        if not path:
            return FileReadCompleted(ok=True, content="")
        try:
            content = await asyncio.to_thread(self.read_file, path)
        except (SourceFileError, OSError) as exc:
            logger.warning("Source file read failed: %s", exc)
            return FileReadCompleted(ok=False, error=f"failed to read source file: {exc}")
        logger.info("Read %d chars from %s", len(content), path)
        return FileReadCompleted(ok=True, content=content)

    async def _generate(self, command: GenerateResume) -> GenerationCompleted:
        llm = self.lifecycle.handle
        if llm is None:
            return GenerationCompleted(ok=False, error="API client is not initialized")

        def on_progress(step: str, message: str) -> None:
            self._post(ProgressUpdated(step=step, message=message))

        try:
            outcome = await self.generator.run(
                llm,
                command.source,
                command.user_input,
                command.output_path,
                on_progress=on_progress,
            )
        except Exception as exc:
            # The session must leave GENERATING whatever happens
            logger.exception("Unexpected failure during generation")
            return GenerationCompleted(ok=False, error=f"unexpected error during generation: {exc}")
        if not outcome.ok:
            return GenerationCompleted(ok=False, error=outcome.error)
        return GenerationCompleted(
            ok=True,
            content=outcome.content,
            output_path=outcome.output_path,
            truncation_notice=outcome.truncation_notice,
        )
