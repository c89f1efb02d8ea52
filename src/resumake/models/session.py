"""Wizard session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Stage(str, Enum):
    WELCOME = "welcome"
    AWAITING_SOURCE_PATH = "awaiting_source_path"
    AWAITING_USER_INPUT = "awaiting_user_input"
    CONFIRM_GENERATION = "confirm_generation"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Progress:
    step: str = ""
    message: str = ""


@dataclass
class Session:
    """Everything the wizard knows about the current run.

    Owned by the event loop; only ``WizardMachine.update`` mutates it.
    """

    stage: Stage = Stage.WELCOME
    api_key_valid: bool = False

    source_path_buffer: str = ""
    source_content: str = ""
    user_input_buffer: str = ""
    user_input_content: str = ""

    output_path: str = ""
    result_summary: str = ""  # character count of the generated resume
    truncation_notice: str = ""
    error_message: str = ""

    progress: Progress = field(default_factory=Progress)
    focused_field: str = ""
    spinner_frame: int = 0
    width: int = 0
    height: int = 0

    flag_source_path: str = ""
    flag_output_path: str = ""
    default_output_path: str = "resume_out.md"

    finished: bool = False

    @classmethod
    def create(
        cls,
        api_key_valid: bool,
        source_path: str = "",
        output_path: str = "",
        default_output_path: str = "resume_out.md",
    ) -> Session:
        """Seed a session from the command-line flags and the API key check."""
        return cls(
            api_key_valid=api_key_valid,
            source_path_buffer=source_path,
            flag_source_path=source_path,
            flag_output_path=output_path,
            default_output_path=default_output_path,
        )
