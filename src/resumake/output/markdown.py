"""Validate and tidy the Markdown returned by the model."""

from __future__ import annotations

import re

MINIMUM_MARKDOWN_LENGTH = 10

# "##Skills" style headings; a single leading "#" is left alone
_UNSPACED_HEADER = re.compile(r"^#{2,6}[^\s#]", re.MULTILINE)
_MARKDOWN_FEATURES = (
    re.compile(r"^#{1,6}\s+.*$", re.MULTILINE),  # headers
    re.compile(r"^[ \t]*[-*+][ \t]+.*$", re.MULTILINE),  # list items
    re.compile(r"^[ \t]*\d+\.[ \t]+.*$", re.MULTILINE),  # numbered lists
    re.compile(r"^(---|\*\*\*|___)\s*$", re.MULTILINE),  # horizontal rules
    re.compile(r"```.*?```", re.DOTALL),  # code blocks
    re.compile(r"\[.+?\]\(.+?\)"),  # links
    re.compile(r"\*\*.+?\*\*|__.+?__|\*[^*\s][^*]*\*"),  # emphasis
)


class MarkdownValidationError(ValueError):
    """Raised when generated text is not usable Markdown."""


def validate_markdown(content: str) -> None:
    """Raise MarkdownValidationError unless content looks like a Markdown resume."""
    if len(content.strip()) < MINIMUM_MARKDOWN_LENGTH:
        raise MarkdownValidationError("content is too short to be valid Markdown")

    if not any(p.search(content) for p in _MARKDOWN_FEATURES):
        raise MarkdownValidationError("content does not contain any Markdown syntax")

    if _UNSPACED_HEADER.search(content):
        raise MarkdownValidationError("headers must have a space after the # characters")


def normalize_markdown(text: str) -> str:
    """Normalize line endings and spacing.

    Handles: CRLF line endings, code fences wrapping the whole document,
    trailing whitespace, missing blank lines around headers and lists,
    and excessive blank lines.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.strip()

    # 1. Unwrap a document that was returned inside a single ```markdown fence
    fenced = re.fullmatch(r"```(?:markdown|md)?\s*\n(.*)\n```", text, flags=re.DOTALL)
    if fenced:
        text = fenced.group(1).strip()

    # 2. Trailing whitespace
    text = re.sub(r"[ \t]+$", "", text, flags=re.MULTILINE)

    # 3. Blank line before and after headers
    text = re.sub(r"([^\n])\n(#{1,6}\s+)", r"\1\n\n\2", text)
    text = re.sub(r"(^#{1,6}\s+.+)\n([^\n])", r"\1\n\n\2", text, flags=re.MULTILINE)

    # 4. Blank line after a list block when a paragraph follows directly
    text = re.sub(
        r"(^[ \t]*[-*+][ \t]+.+)\n([^\s\-*+\n#])", r"\1\n\n\2", text, flags=re.MULTILINE
    )

    # 5. Remove excessive blank lines (3+ -> 2)
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text.strip()


def prepare_for_output(content: str) -> str:
    """Validate then normalize; raises MarkdownValidationError."""
    validate_markdown(content)
    return normalize_markdown(content)
