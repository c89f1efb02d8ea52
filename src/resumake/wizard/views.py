"""Rich renderables for each wizard stage."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from resumake.clients.llm_client import API_KEY_ENV
from resumake.models.session import Session, Stage
from resumake.wizard.error_analyzer import classify

SPINNER_FRAMES = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")
INPUT_PREVIEW_LINES = 12


@dataclass(frozen=True)
class Theme:
    """Styles used by the views. Never reaches the state machine."""

    title: str = "bold #7D56F4"
    accent: str = "bold #F2C94C"
    success: str = "bold green"
    error: str = "bold red"
    warning: str = "yellow"
    muted: str = "dim"
    border: str = "#7D56F4"
    error_border: str = "red"


DEFAULT_THEME = Theme()


def render(session: Session, theme: Theme = DEFAULT_THEME) -> RenderableType:
    """Return the renderable for the session's current stage."""
    view = _VIEWS.get(session.stage)
    if view is None:
        return Text("Unknown state", style=theme.error)
    return view(session, theme)


def _panel(body: RenderableType, title: str, theme: Theme, border: str | None = None) -> Panel:
    return Panel(
        body,
        title=Text(title, style=theme.title),
        border_style=border or theme.border,
        padding=(1, 2),
    )


def _welcome(session: Session, theme: Theme) -> RenderableType:
    body = Text()
    body.append("Welcome to Resumake!\n\n", style=theme.accent)
    body.append(
        "Resumake merges your existing resume (optional) with notes about your "
        "experience and asks Claude to write a polished Markdown resume.\n\n"
    )
    if session.api_key_valid:
        body.append(f"✓ {API_KEY_ENV} detected\n", style=theme.success)
    else:
        body.append(f"✗ {API_KEY_ENV} not set\n", style=theme.error)
    if session.flag_source_path:
        body.append(f"Source file: {session.flag_source_path}\n", style=theme.muted)
    if session.flag_output_path:
        body.append(f"Output file: {session.flag_output_path}\n", style=theme.muted)
    body.append("\nPress Enter to continue, :q to quit.", style=theme.muted)
    return _panel(body, "Resumake", theme)


def _source_path(session: Session, theme: Theme) -> RenderableType:
    body = Text()
    body.append("Path to an existing resume (.txt, .md, .markdown)\n", style=theme.accent)
    body.append("Leave empty to start from scratch.\n\n", style=theme.muted)
    body.append("> ")
    body.append(session.source_path_buffer or "", style="bold")
    body.append("\n\nType the path and press Enter. :q or :b quits.", style=theme.muted)
    return _panel(body, "Step 1 of 3 · Existing resume", theme)


def _user_input(session: Session, theme: Theme) -> RenderableType:
    header = Text()
    header.append("Tell us about your experience, skills, projects and education.\n", style=theme.accent)
    if session.source_content:
        header.append(f"Loaded existing resume ({len(session.source_content)} chars).\n", style=theme.success)
    header.append("Finish with Ctrl+D on an empty line. :q or :b quits and discards your notes.\n", style=theme.muted)

    lines = session.user_input_buffer.splitlines()
    preview = "\n".join(lines[-INPUT_PREVIEW_LINES:])
    if len(lines) > INPUT_PREVIEW_LINES:
        preview = f"… ({len(lines) - INPUT_PREVIEW_LINES} earlier lines)\n{preview}"
    return _panel(Group(header, Text(preview)), "Step 2 of 3 · Your details", theme)


def _confirm(session: Session, theme: Theme) -> RenderableType:
    body = Text()
    body.append("Ready to generate your resume.\n\n", style=theme.accent)
    if session.source_content:
        body.append(f"Existing resume: {len(session.source_content)} chars\n")
    else:
        body.append("Existing resume: none\n", style=theme.muted)
    body.append(f"Your input: {len(session.user_input_content)} chars\n")
    output = session.flag_output_path or f"{session.default_output_path} (default)"
    body.append(f"Output file: {output}\n")
    body.append("\nPress Enter to generate, :b to edit your input, :q to quit.", style=theme.muted)
    return _panel(body, "Step 3 of 3 · Confirm", theme)


def _generating(session: Session, theme: Theme) -> RenderableType:
    frame = SPINNER_FRAMES[session.spinner_frame % len(SPINNER_FRAMES)]
    body = Text()
    body.append(f"{frame} ", style=theme.accent)
    body.append("Generating your resume...\n\n", style="bold")
    if session.progress.step:
        body.append(f"[{session.progress.step}] ", style=theme.accent)
    body.append(session.progress.message or "Working...")
    body.append("\n\nThis can take a minute. Ctrl+C cancels.", style=theme.muted)
    return _panel(body, "Generating", theme)


def _success(session: Session, theme: Theme) -> RenderableType:
    body = Text()
    body.append("✓ Resume generated!\n\n", style=theme.success)
    body.append(f"Saved to: {session.output_path}\n")
    body.append(f"Length: {session.result_summary} chars\n")
    if session.truncation_notice:
        body.append(f"\n⚠ {session.truncation_notice}\n", style=theme.warning)
        body.append("The resume may be incomplete; consider shortening your input.\n", style=theme.muted)
    body.append("\nPress Enter to exit.", style=theme.muted)
    return _panel(body, "Done", theme, border=theme.success)


def _error(session: Session, theme: Theme) -> RenderableType:
    record = classify(session.error_message)
    body = Text()
    body.append(f"✗ {record.category.value}\n\n", style=theme.error)
    body.append(f"{record.raw_message}\n\n")
    body.append("Troubleshooting:\n", style="bold")
    for hint in record.hints:
        body.append(f"  • {hint}\n")
    if record.doc_ref:
        body.append(f"\n{record.doc_ref}\n", style=theme.muted)
    body.append("\nPress Enter to exit.", style=theme.muted)
    return _panel(body, "Error", theme, border=theme.error_border)


_VIEWS = {
    Stage.WELCOME: _welcome,
    Stage.AWAITING_SOURCE_PATH: _source_path,
    Stage.AWAITING_USER_INPUT: _user_input,
    Stage.CONFIRM_GENERATION: _confirm,
    Stage.GENERATING: _generating,
    Stage.SUCCESS: _success,
    Stage.ERROR: _error,
}
