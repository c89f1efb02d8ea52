"""Event loop that connects the terminal, the state machine and the dispatcher."""

from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import TextIO

from rich.console import Console
from rich.live import Live

from resumake.clients.lifecycle import ClientLifecycle
from resumake.models.events import (
    KEY_BACK,
    KEY_ENTER,
    KEY_FINISH,
    KEY_RUNE,
    Event,
    KeyPress,
    QuitRequested,
    WindowResize,
)
from resumake.models.session import Session, Stage
from resumake.parsers.source_reader import read_source_file
from resumake.pipeline.generator import ResumeGenerator
from resumake.wizard.dispatcher import CommandDispatcher, FileReader
from resumake.wizard.machine import STALE_HONOR, WizardMachine
from resumake.wizard.views import DEFAULT_THEME, Theme, render

logger = logging.getLogger(__name__)

QUIT_LINE = ":q"
BACK_LINE = ":b"


def line_to_events(line: str) -> list[Event]:
    """Translate one line read from the terminal into key events.

    An empty read means end of input (Ctrl+D). ``:q`` quits and ``:b`` goes
    back; anything else is typed character by character.
    """
    if line == "":
        return [KeyPress(KEY_FINISH)]
    stripped = line.rstrip("\r\n")
    if stripped.strip() == QUIT_LINE:
        return [QuitRequested()]
    if stripped.strip() == BACK_LINE:
        return [KeyPress(KEY_BACK)]
    events: list[Event] = [KeyPress(KEY_RUNE, ch) for ch in stripped]
    # a partial line is what the terminal hands over when Ctrl+D ends input mid-line
    events.append(KeyPress(KEY_ENTER) if line.endswith("\n") else KeyPress(KEY_FINISH))
    return events


class KeyReader(threading.Thread):
    """Reads lines from a stream on a daemon thread and posts key events."""

    def __init__(self, stream: TextIO, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        super().__init__(name="resumake-keys", daemon=True)
        self.stream = stream
        self.loop = loop
        self.queue = queue

    def run(self) -> None:
        interactive = self.stream.isatty()
        while True:
            try:
                line = self.stream.readline()
            except (OSError, ValueError):
                logger.debug("Input stream closed")
                return
            for event in line_to_events(line):
                try:
                    self.loop.call_soon_threadsafe(self.queue.put_nowait, event)
                except RuntimeError:
                    return  # loop already closed
            if line == "" and not interactive:
                return


class WizardRunner:
    """Drives one wizard session until it finishes."""

    def __init__(
        self,
        session: Session,
        lifecycle: ClientLifecycle,
        generator: ResumeGenerator,
        *,
        console: Console | None = None,
        theme: Theme = DEFAULT_THEME,
        input_stream: TextIO | None = None,
        read_file: FileReader = read_source_file,
        stale_file_errors: str = STALE_HONOR,
        tick_interval: float = 0.1,
        handle_signals: bool = True,
    ):
        self.session = session
        self.lifecycle = lifecycle
        self.console = console or Console()
        self.theme = theme
        self.input_stream = input_stream
        self.handle_signals = handle_signals
        self.queue: asyncio.Queue[Event] = asyncio.Queue()
        self.machine = WizardMachine(lifecycle, stale_file_errors=stale_file_errors)
        self.dispatcher = CommandDispatcher(
            self.post,
            lifecycle,
            generator,
            read_file=read_file,
            tick_interval=tick_interval,
        )
        self._live: Live | None = None
        self._shown_stage: Stage | None = None

    def post(self, event: Event) -> None:
        """Queue an event. Call from the event loop thread only."""
        self.queue.put_nowait(event)

    async def run(self) -> Session:
        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop) if self.handle_signals else []
        if self.input_stream is not None:
            KeyReader(self.input_stream, loop, self.queue).start()

        width, height = self.console.size
        self.post(WindowResize(width=width, height=height))

        try:
            self._render()
            while not self.session.finished:
                event = await self.queue.get()
                logger.debug("Event %s in stage %s", type(event).__name__, self.session.stage.value)
                self.session, commands = self.machine.update(self.session, event)
                for command in commands:
                    self.dispatcher.dispatch(command)
                if self.queue.empty() or self.session.finished:
                    self._render()
        finally:
            self._stop_live()
            await self.dispatcher.shutdown()
            for sig in installed:
                loop.remove_signal_handler(sig)
        return self.session

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list[int]:
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError):
                continue  # not supported on this platform / thread
            installed.append(sig)
        return installed

    def _on_signal(self, sig: int) -> None:
        logger.info("Received signal %s", signal.Signals(sig).name)
        self.dispatcher.cancel()
        self.post(QuitRequested())

    def _render(self) -> None:
        if self.session.finished:
            self._stop_live()
            return
        stage = self.session.stage
        view = render(self.session, self.theme)
        if stage is Stage.GENERATING:
            if self._live is None:
                self.console.clear()
                self._live = Live(view, console=self.console, refresh_per_second=12)
                self._live.start()
            else:
                self._live.update(view)
            self._shown_stage = stage
            return

        self._stop_live()
        if stage is not self._shown_stage:
            self.console.clear()
            self.console.print(view)
            self._shown_stage = stage

    def _stop_live(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
