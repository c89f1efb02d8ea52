"""Read an existing resume to merge into the generated one."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
SUPPORTED_EXTENSIONS = (".txt", ".md", ".markdown")


class SourceFileError(ValueError):
    """Raised when the source resume cannot be used."""


def read_source_file(
    file_path: str | Path,
    max_size: int = MAX_FILE_SIZE,
    supported_extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
) -> str:
    """Return the text of a resume file.

    Missing, non-regular, oversized or unreadable files raise
    SourceFileError. An unexpected extension only logs a warning.
    """
    path = Path(file_path)
    try:
        info = path.stat()
    except FileNotFoundError:
        raise SourceFileError(f"file does not exist: {path}") from None
    except OSError as exc:
        raise SourceFileError(f"error accessing file {path}: {exc}") from exc

    if not stat.S_ISREG(info.st_mode):
        raise SourceFileError(f"{path} is not a regular file")

    if info.st_size > max_size:
        raise SourceFileError(
            f"file size exceeds the maximum allowed size of {max_size} bytes: {path}"
        )

    if path.suffix.lower() not in supported_extensions:
        logger.warning(
            "%s has an unsupported file extension. Supported extensions are: %s",
            path,
            ", ".join(supported_extensions),
        )

    if not os.access(path, os.R_OK):
        raise SourceFileError(f"error accessing file {path}: permission denied")

    try:
        return path.read_text(encoding="utf-8")
    except PermissionError as exc:
        raise SourceFileError(f"error accessing file {path}: permission denied") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceFileError(f"error reading file {path}: {exc}") from exc
