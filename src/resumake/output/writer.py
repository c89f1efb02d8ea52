"""Write the generated resume to disk."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "resume_out.md"


class OutputWriteError(OSError):
    """Raised when the resume cannot be written."""


class OutputDirectoryError(OutputWriteError):
    """Raised when the output directory is unusable."""


def _ensure_directory(directory: Path) -> None:
    if directory.exists():
        if not directory.is_dir():
            raise OutputDirectoryError(f"{directory} exists but is not a directory")
        return
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        # errno text ("Permission denied") would read as a file permission problem
        logger.debug("mkdir %s failed: %s", directory, exc)
        raise OutputDirectoryError(f"failed to create directory {directory}") from exc


def write_output(content: str, output_path: str | Path | None = None) -> str:
    """Write content to output_path (or the default) and return the path used."""
    path = Path(output_path or DEFAULT_OUTPUT_PATH)
    _ensure_directory(path.parent)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(f"failed to write to file {path}: {exc}") from exc
    logger.info("Resume written to %s (%d chars)", path, len(content))
    return str(path)
