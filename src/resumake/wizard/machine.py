"""The wizard state machine.

``WizardMachine.update`` consumes one event and returns the session together
with the commands the dispatcher should run. It never performs I/O itself;
the only collaborator it touches is the injected client lifecycle, whose
``initialize`` is synchronous and side-effect free apart from building the
client object.
"""

from __future__ import annotations

import logging

from resumake.clients.lifecycle import ClientInitError, ClientLifecycle
from resumake.clients.llm_client import API_KEY_ENV
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
    KEY_BACK,
    KEY_BACKSPACE,
    KEY_ENTER,
    KEY_FINISH,
    KEY_INTERRUPT,
    KEY_RUNE,
    Event,
    FileReadCompleted,
    GenerationCompleted,
    KeyPress,
    ProgressUpdated,
    QuitRequested,
    TickElapsed,
    UserInputFinished,
    WindowResize,
)
from resumake.models.session import Progress, Session, Stage

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = (
    f"Invalid API key: {API_KEY_ENV} environment variable is missing or empty. "
    f"Set {API_KEY_ENV} and restart."
)

SOURCE_FIELD = "source"
INPUT_FIELD = "input"

# Stages in which a successfully read source file is still useful
_SOURCE_STAGES = (Stage.AWAITING_SOURCE_PATH, Stage.AWAITING_USER_INPUT, Stage.CONFIRM_GENERATION)
_TERMINAL_STAGES = (Stage.SUCCESS, Stage.ERROR)

STALE_HONOR = "honor"
STALE_IGNORE = "ignore"

Update = tuple[Session, list[Command]]


class WizardMachine:
    """Transition table for the resume wizard."""

    def __init__(self, lifecycle: ClientLifecycle, stale_file_errors: str = STALE_HONOR):
        if stale_file_errors not in (STALE_HONOR, STALE_IGNORE):
            raise ValueError(f"unknown stale_file_errors policy: {stale_file_errors!r}")
        self.lifecycle = lifecycle
        self.stale_file_errors = stale_file_errors

    def update(self, session: Session, event: Event) -> Update:
        if session.finished:
            return session, []

        if isinstance(event, QuitRequested):
            return self._quit(session)
        if isinstance(event, WindowResize):
            session.width = event.width
            session.height = event.height
            return session, []
        if isinstance(event, KeyPress):
            return self._on_key(session, event)
        if isinstance(event, FileReadCompleted):
            return self._on_file_read(session, event)
        if isinstance(event, UserInputFinished):
            return self._on_user_input(session, event)
        if isinstance(event, ProgressUpdated):
            session.progress = Progress(step=event.step, message=event.message)
            return session, []
        if isinstance(event, GenerationCompleted):
            return self._on_generation(session, event)
        if isinstance(event, TickElapsed):
            return self._on_tick(session)

        logger.warning("Ignoring unknown event %r", event)
        return session, []

    # --- events ---

    def _on_key(self, session: Session, key: KeyPress) -> Update:
        if key.key == KEY_INTERRUPT:
            return self._quit(session)
        if key.key == KEY_BACK and session.stage is not Stage.CONFIRM_GENERATION:
            return self._quit(session)

        stage = session.stage
        if stage is Stage.WELCOME:
            if key.key == KEY_ENTER:
                return self._leave_welcome(session)
        elif stage is Stage.AWAITING_SOURCE_PATH:
            if key.key == KEY_ENTER:
                session.stage = Stage.AWAITING_USER_INPUT
                return session, [
                    ReadSourceFile(session.source_path_buffer.strip()),
                    self._focus(session, INPUT_FIELD),
                ]
            session.source_path_buffer = _edit(session.source_path_buffer, key, multiline=False)
        elif stage is Stage.AWAITING_USER_INPUT:
            if key.key == KEY_FINISH:
                return session, [SubmitUserInput(session.user_input_buffer)]
            session.user_input_buffer = _edit(session.user_input_buffer, key, multiline=True)
        elif stage is Stage.CONFIRM_GENERATION:
            if key.key == KEY_ENTER:
                return self._start_generation(session)
            if key.key == KEY_BACK:
                session.stage = Stage.AWAITING_USER_INPUT
                return session, [self._focus(session, INPUT_FIELD)]
        elif stage in _TERMINAL_STAGES:
            if key.key == KEY_ENTER:
                return self._quit(session)
        return session, []

    def _on_file_read(self, session: Session, result: FileReadCompleted) -> Update:
        if result.ok:
            if session.stage in _SOURCE_STAGES:
                session.source_content = result.content
            else:
                logger.debug("Dropping source file content that arrived in stage %s", session.stage)
            return session, []

        stale = session.stage is not Stage.AWAITING_USER_INPUT
        if stale and self.stale_file_errors == STALE_IGNORE:
            logger.info("Ignoring stale file read failure in stage %s: %s", session.stage, result.error)
            return session, []
        if session.stage is Stage.GENERATING:
            # the run was built without the requested source; stop it before it writes
            self._fail(session, result.error)
            return session, [CancelGeneration(), CloseClient()]
        return self._fail(session, result.error)

    def _on_user_input(self, session: Session, submitted: UserInputFinished) -> Update:
        if session.stage is not Stage.AWAITING_USER_INPUT:
            return session, []
        session.user_input_content = submitted.content
        session.stage = Stage.CONFIRM_GENERATION
        return session, []

    def _on_generation(self, session: Session, result: GenerationCompleted) -> Update:
        if session.stage is not Stage.GENERATING:
            logger.warning("Generation result arrived outside the generating stage")
            return session, []
        if result.ok:
            session.stage = Stage.SUCCESS
            session.output_path = result.output_path
            session.result_summary = str(len(result.content))
            session.truncation_notice = result.truncation_notice
        else:
            session.stage = Stage.ERROR
            session.error_message = result.error
        return session, [CloseClient()]

    def _on_tick(self, session: Session) -> Update:
        if session.stage is not Stage.GENERATING:
            return session, []
        session.spinner_frame += 1
        return session, [Tick()]

    # --- transitions ---

    def _leave_welcome(self, session: Session) -> Update:
        if not session.api_key_valid:
            return self._fail(session, MISSING_API_KEY_MESSAGE)
        try:
            self.lifecycle.initialize()
        except ClientInitError as exc:
            return self._fail(session, str(exc))
        session.stage = Stage.AWAITING_SOURCE_PATH
        return session, [self._focus(session, SOURCE_FIELD)]

    def _start_generation(self, session: Session) -> Update:
        session.stage = Stage.GENERATING
        session.spinner_frame = 0
        session.progress = Progress(step="Starting", message="Initializing resume generation...")
        return session, [
            EmitProgress(session.progress.step, session.progress.message),
            GenerateResume(
                source=session.source_content,
                user_input=session.user_input_content,
                output_path=session.flag_output_path,
            ),
            Tick(),
        ]

    def _fail(self, session: Session, message: str) -> Update:
        session.stage = Stage.ERROR
        session.error_message = message
        return session, []

    def _quit(self, session: Session) -> Update:
        session.finished = True
        return session, [CloseClient(), Quit()]

    @staticmethod
    def _focus(session: Session, name: str) -> FocusField:
        session.focused_field = name
        return FocusField(name)


def _edit(buffer: str, key: KeyPress, *, multiline: bool) -> str:
    """Apply a text-editing key to a buffer."""
    if key.key == KEY_RUNE:
        return buffer + key.text
    if key.key == KEY_BACKSPACE:
        return buffer[:-1]
    if key.key == KEY_ENTER and multiline:
        return buffer + "\n"
    return buffer
