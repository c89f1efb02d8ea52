"""Side effects requested by the state machine and run by the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReadSourceFile:
    path: str


@dataclass(frozen=True)
class SubmitUserInput:
    content: str


@dataclass(frozen=True)
class GenerateResume:
    source: str
    user_input: str
    output_path: str


@dataclass(frozen=True)
class EmitProgress:
    step: str
    message: str


@dataclass(frozen=True)
class FocusField:
    name: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class CancelGeneration:
    pass


@dataclass(frozen=True)
class CloseClient:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Command = (
    ReadSourceFile
    | SubmitUserInput
    | GenerateResume
    | CancelGeneration
    | EmitProgress
    | FocusField
    | Tick
    | CloseClient
    | Quit
)
