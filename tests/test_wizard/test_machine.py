"""Tests for the wizard state machine."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from resumake.clients.lifecycle import ClientLifecycle, HandleState
from resumake.models.commands import (
    CancelGeneration,
    CloseClient,
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
    FileReadCompleted,
    GenerationCompleted,
    KeyPress,
    ProgressUpdated,
    QuitRequested,
    TickElapsed,
    UserInputFinished,
    WindowResize,
)
from resumake.models.session import Session, Stage
from resumake.wizard.machine import (
    INPUT_FIELD,
    MISSING_API_KEY_MESSAGE,
    SOURCE_FIELD,
    STALE_IGNORE,
    WizardMachine,
)

ENTER = KeyPress(KEY_ENTER)


def _type(machine, session, text):
    for ch in text:
        session, _ = machine.update(session, KeyPress(KEY_RUNE, ch))
    return session


@pytest.fixture
def machine(lifecycle) -> WizardMachine:
    return WizardMachine(lifecycle)


class TestWelcome:
    def test_scenario_a_confirm_initializes_client(self, machine, lifecycle, session):
        session, commands = machine.update(session, ENTER)
        assert session.stage is Stage.AWAITING_SOURCE_PATH
        assert lifecycle.handle is not None
        assert commands == [FocusField(SOURCE_FIELD)]
        assert session.focused_field == SOURCE_FIELD

    def test_missing_api_key(self, machine, lifecycle):
        session = Session.create(api_key_valid=False)
        session, commands = machine.update(session, ENTER)
        assert session.stage is Stage.ERROR
        assert session.error_message == MISSING_API_KEY_MESSAGE
        assert commands == []
        assert lifecycle.state is HandleState.UNINITIALIZED

    def test_client_init_failure(self, session):
        lc = ClientLifecycle(
            factory=MagicMock(side_effect=RuntimeError("bad transport")),
            key_provider=lambda: "k",
        )
        session, _ = WizardMachine(lc).update(session, ENTER)
        assert session.stage is Stage.ERROR
        assert session.error_message == "failed to initialize API client: bad transport"

    def test_other_keys_ignored(self, machine, session):
        session, commands = machine.update(session, KeyPress(KEY_RUNE, "x"))
        assert session.stage is Stage.WELCOME
        assert commands == []

    def test_unknown_policy_rejected(self, lifecycle):
        with pytest.raises(ValueError, match="stale_file_errors"):
            WizardMachine(lifecycle, stale_file_errors="maybe")


class TestSourcePath:
    def test_scenario_b_empty_path(self, machine, session_at):
        session = session_at(Stage.AWAITING_SOURCE_PATH)
        session, commands = machine.update(session, ENTER)
        assert session.stage is Stage.AWAITING_USER_INPUT
        assert commands == [ReadSourceFile(""), FocusField(INPUT_FIELD)]

    def test_typed_path_is_trimmed(self, machine, session_at):
        session = session_at(Stage.AWAITING_SOURCE_PATH)
        session = _type(machine, session, " cv.md ")
        session, commands = machine.update(session, ENTER)
        assert commands[0] == ReadSourceFile("cv.md")

    def test_flag_prefills_buffer(self, machine):
        session = Session.create(api_key_valid=True, source_path="old.md")
        session, _ = machine.update(session, ENTER)
        session, commands = machine.update(session, ENTER)
        assert commands[0] == ReadSourceFile("old.md")

    def test_backspace(self, machine, session_at):
        session = session_at(Stage.AWAITING_SOURCE_PATH, source_path_buffer="ab")
        session, _ = machine.update(session, KeyPress(KEY_BACKSPACE))
        assert session.source_path_buffer == "a"
        session, _ = machine.update(session, KeyPress(KEY_BACKSPACE))
        session, _ = machine.update(session, KeyPress(KEY_BACKSPACE))
        assert session.source_path_buffer == ""

    def test_file_content_stored(self, machine, session_at):
        session = session_at(Stage.AWAITING_USER_INPUT)
        session, _ = machine.update(session, FileReadCompleted(ok=True, content="resume"))
        assert session.source_content == "resume"

    def test_file_failure_while_awaiting_input(self, machine, session_at):
        session = session_at(Stage.AWAITING_USER_INPUT)
        session, commands = machine.update(
            session, FileReadCompleted(ok=False, error="failed to read source file: file does not exist: x")
        )
        assert session.stage is Stage.ERROR
        assert session.error_message == "failed to read source file: file does not exist: x"
        assert commands == []


class TestUserInput:
    def test_enter_inserts_newline(self, machine, session_at):
        session = session_at(Stage.AWAITING_USER_INPUT)
        session = _type(machine, session, "a")
        session, _ = machine.update(session, ENTER)
        session = _type(machine, session, "b")
        assert session.user_input_buffer == "a\nb"
        assert session.stage is Stage.AWAITING_USER_INPUT

    def test_finish_submits_buffer(self, machine, session_at):
        session = session_at(Stage.AWAITING_USER_INPUT, user_input_buffer="X")
        session, commands = machine.update(session, KeyPress(KEY_FINISH))
        assert commands == [SubmitUserInput("X")]
        assert session.stage is Stage.AWAITING_USER_INPUT

    def test_scenario_c(self, machine, session_at):
        session = session_at(Stage.AWAITING_USER_INPUT)
        session, _ = machine.update(session, UserInputFinished("X"))
        assert session.stage is Stage.CONFIRM_GENERATION
        assert session.user_input_content == "X"

        session, commands = machine.update(session, ENTER)
        assert session.stage is Stage.GENERATING
        generate = [c for c in commands if isinstance(c, GenerateResume)]
        assert generate == [GenerateResume(source="", user_input="X", output_path="")]

    def test_finished_input_ignored_elsewhere(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, _ = machine.update(session, UserInputFinished("late"))
        assert session.stage is Stage.GENERATING
        assert session.user_input_content == ""


class TestConfirm:
    def test_start_generation_commands(self, machine, session_at):
        session = session_at(
            Stage.CONFIRM_GENERATION,
            source_content="old",
            user_input_content="new",
            flag_output_path="out.md",
        )
        session, commands = machine.update(session, ENTER)
        assert commands == [
            EmitProgress("Starting", "Initializing resume generation..."),
            GenerateResume(source="old", user_input="new", output_path="out.md"),
            Tick(),
        ]
        assert session.progress.step == "Starting"

    def test_back_returns_to_input(self, machine, session_at):
        session = session_at(Stage.CONFIRM_GENERATION, user_input_buffer="keep")
        session, commands = machine.update(session, KeyPress(KEY_BACK))
        assert session.stage is Stage.AWAITING_USER_INPUT
        assert session.user_input_buffer == "keep"
        assert commands == [FocusField(INPUT_FIELD)]
        assert not session.finished


class TestGenerating:
    def test_scenario_d(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, commands = machine.update(
            session, GenerationCompleted(ok=True, content="# R", output_path="out.md")
        )
        assert session.stage is Stage.SUCCESS
        assert session.output_path == "out.md"
        assert session.result_summary == "3"
        assert commands == [CloseClient()]

    def test_truncated_success(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, _ = machine.update(
            session,
            GenerationCompleted(
                ok=True, content="# R", output_path="o.md", truncation_notice="Warning: truncated"
            ),
        )
        assert session.stage is Stage.SUCCESS
        assert session.truncation_notice == "Warning: truncated"

    def test_failure(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, commands = machine.update(
            session, GenerationCompleted(ok=False, error="network error while contacting API")
        )
        assert session.stage is Stage.ERROR
        assert session.error_message == "network error while contacting API"
        assert commands == [CloseClient()]

    def test_completion_outside_generating_ignored(self, machine, session_at):
        session = session_at(Stage.CONFIRM_GENERATION)
        session, commands = machine.update(session, GenerationCompleted(ok=True, content="# R"))
        assert session.stage is Stage.CONFIRM_GENERATION
        assert commands == []

    def test_progress_updates(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, _ = machine.update(session, ProgressUpdated("2 of 4", "Sending..."))
        assert session.progress.step == "2 of 4"
        assert session.stage is Stage.GENERATING

    @pytest.mark.parametrize("stage", [s for s in Stage if s is not Stage.GENERATING])
    def test_progress_never_changes_stage(self, machine, session_at, stage):
        session = session_at(stage)
        session, commands = machine.update(session, ProgressUpdated("x", "y"))
        assert session.stage is stage
        assert commands == []

    def test_tick_rearms_while_generating(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, commands = machine.update(session, TickElapsed())
        assert session.spinner_frame == 1
        assert commands == [Tick()]

    def test_tick_stops_after_generation(self, machine, session_at):
        session = session_at(Stage.SUCCESS)
        session, commands = machine.update(session, TickElapsed())
        assert commands == []

    def test_keys_ignored_while_generating(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, commands = machine.update(session, ENTER)
        assert session.stage is Stage.GENERATING
        assert commands == []


class TestStaleFileEvents:
    def test_late_failure_during_generation_honored(self, machine, session_at):
        session = session_at(Stage.GENERATING)
        session, commands = machine.update(
            session, FileReadCompleted(ok=False, error="failed to read source file: x")
        )
        assert session.stage is Stage.ERROR
        assert commands == [CancelGeneration(), CloseClient()]
        # the generation result that follows no longer applies
        session, commands = machine.update(session, GenerationCompleted(ok=True, content="# R"))
        assert session.stage is Stage.ERROR
        assert commands == []

    def test_failure_before_generation_cancels_nothing(self, machine, session_at):
        session = session_at(Stage.CONFIRM_GENERATION)
        session, commands = machine.update(session, FileReadCompleted(ok=False, error="x"))
        assert session.stage is Stage.ERROR
        assert commands == []

    def test_late_failure_ignored_by_policy(self, lifecycle, session_at):
        machine = WizardMachine(lifecycle, stale_file_errors=STALE_IGNORE)
        session = session_at(Stage.GENERATING)
        session, _ = machine.update(session, FileReadCompleted(ok=False, error="x"))
        assert session.stage is Stage.GENERATING

    def test_ignore_policy_still_fails_awaiting_input(self, lifecycle, session_at):
        machine = WizardMachine(lifecycle, stale_file_errors=STALE_IGNORE)
        session = session_at(Stage.AWAITING_USER_INPUT)
        session, _ = machine.update(session, FileReadCompleted(ok=False, error="x"))
        assert session.stage is Stage.ERROR

    def test_late_content_after_generation_dropped(self, machine, session_at):
        session = session_at(Stage.SUCCESS)
        session, _ = machine.update(session, FileReadCompleted(ok=True, content="late"))
        assert session.source_content == ""


class TestQuit:
    @pytest.mark.parametrize("stage", list(Stage))
    def test_scenario_e_quit_from_any_stage(self, machine, session_at, stage):
        session = session_at(stage)
        session, commands = machine.update(session, QuitRequested())
        assert session.finished
        assert commands == [CloseClient(), Quit()]

    @pytest.mark.parametrize("stage", list(Stage))
    def test_ctrl_c_quits(self, machine, session_at, stage):
        session, commands = machine.update(session_at(stage), KeyPress(KEY_INTERRUPT))
        assert session.finished
        assert Quit() in commands

    def test_esc_quits_outside_confirm(self, machine, session_at):
        session, _ = machine.update(session_at(Stage.AWAITING_USER_INPUT), KeyPress(KEY_BACK))
        assert session.finished

    @pytest.mark.parametrize("stage", [Stage.SUCCESS, Stage.ERROR])
    def test_enter_exits_terminal_stages(self, machine, session_at, stage):
        session, commands = machine.update(session_at(stage), ENTER)
        assert session.finished
        assert commands == [CloseClient(), Quit()]

    def test_finished_session_ignores_events(self, machine, session_at):
        session = session_at(Stage.WELCOME, finished=True)
        session, commands = machine.update(session, ENTER)
        assert commands == []
        assert session.stage is Stage.WELCOME


class TestResize:
    def test_resize_recorded(self, machine, session):
        session, commands = machine.update(session, WindowResize(120, 40))
        assert (session.width, session.height) == (120, 40)
        assert commands == []
