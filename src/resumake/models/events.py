"""Events consumed by the wizard state machine."""

from __future__ import annotations

from dataclasses import dataclass

# Key names carried by KeyPress.key
KEY_ENTER = "enter"
KEY_FINISH = "ctrl+d"
KEY_BACK = "esc"
KEY_INTERRUPT = "ctrl+c"
KEY_BACKSPACE = "backspace"
KEY_RUNE = "rune"


@dataclass(frozen=True)
class KeyPress:
    key: str
    text: str = ""  # only set for KEY_RUNE


@dataclass(frozen=True)
class WindowResize:
    width: int
    height: int


@dataclass(frozen=True)
class FileReadCompleted:
    ok: bool
    content: str = ""
    error: str = ""


@dataclass(frozen=True)
class UserInputFinished:
    content: str


@dataclass(frozen=True)
class GenerationCompleted:
    ok: bool
    content: str = ""
    output_path: str = ""
    truncation_notice: str = ""
    error: str = ""


@dataclass(frozen=True)
class ProgressUpdated:
    step: str
    message: str


@dataclass(frozen=True)
class QuitRequested:
    pass


@dataclass(frozen=True)
class TickElapsed:
    """Spinner timer fired; only meaningful while generating."""


Event = (
    KeyPress
    | WindowResize
    | FileReadCompleted
    | UserInputFinished
    | GenerationCompleted
    | ProgressUpdated
    | QuitRequested
    | TickElapsed
)
