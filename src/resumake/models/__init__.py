"""Data models for the resume wizard."""

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
from resumake.models.errors import ErrorCategory, ErrorRecord
from resumake.models.events import (
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

__all__ = [
    "CancelGeneration",
    "CloseClient",
    "Command",
    "EmitProgress",
    "ErrorCategory",
    "ErrorRecord",
    "Event",
    "FileReadCompleted",
    "FocusField",
    "GenerateResume",
    "GenerationCompleted",
    "KeyPress",
    "Progress",
    "ProgressUpdated",
    "Quit",
    "QuitRequested",
    "ReadSourceFile",
    "Session",
    "Stage",
    "SubmitUserInput",
    "Tick",
    "TickElapsed",
    "UserInputFinished",
    "WindowResize",
]
