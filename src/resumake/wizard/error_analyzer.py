"""Map raw failure text to a category, troubleshooting hints and a doc link.

Rules are checked in order and the first match wins, so the more specific
API categories come before the looser file and output ones. Matching is a
case-insensitive substring test.
"""

from __future__ import annotations

from dataclasses import dataclass

from resumake.clients.llm_client import API_KEY_ENV
from resumake.models.errors import ErrorCategory, ErrorRecord

API_ERRORS_DOC_REF = "For API issues, visit: https://docs.anthropic.com/en/api/errors"
SAFETY_DOC_REF = (
    "Claude documentation on refusals: "
    "https://docs.anthropic.com/en/docs/test-and-evaluate/strengthen-guardrails/handle-streaming-refusals"
)

GENERIC_HINTS = [
    "Try running the command again",
    "Check the application logs for more details",
    "Restart the application and try again",
]


@dataclass(frozen=True)
class _Rule:
    category: ErrorCategory
    patterns: tuple[str, ...]
    hints: tuple[str, ...]
    doc_ref: str | None = None
    excludes: tuple[str, ...] = ()

    def matches(self, lowered: str) -> bool:
        if any(word in lowered for word in self.excludes):
            return False
        return any(p in lowered for p in self.patterns)


RULES: tuple[_Rule, ...] = (
    _Rule(
        ErrorCategory.AUTH,
        ("api authentication error", "authentication_error", "unauthenticated",
         "invalid api key", "api key not valid", "invalid x-api-key", "api key error",
         "failed to initialize api client"),
        (
            f"Check your {API_KEY_ENV} environment variable is set correctly",
            "Verify your API key is valid and not expired",
            "Make sure you're using the correct API key format",
        ),
        API_ERRORS_DOC_REF,
    ),
    _Rule(
        ErrorCategory.QUOTA,
        ("quota or rate limit exceeded", "resource_exhausted", "quota exceeded",
         "rate limit", "rate_limit_error"),
        (
            "Wait a few minutes and try again",
            "Check if you've reached your API usage limit for the day",
            "Consider creating a new API key or upgrading your account",
        ),
        API_ERRORS_DOC_REF,
    ),
    _Rule(
        ErrorCategory.NETWORK,
        ("network error", "deadline exceeded", "connection", "timeout", "timed out"),
        (
            "Check your internet connection",
            "Verify you can reach the Claude API (api.anthropic.com)",
            "If using a proxy or VPN, try disabling it temporarily",
        ),
    ),
    _Rule(
        ErrorCategory.SAFETY_FILTER,
        ("safety filters", "content was blocked", "safety categories flagged",
         "harmcategory", "refusal"),
        (
            "Your content was flagged by the AI safety system",
            "Review your input for potentially sensitive or inappropriate content",
            "Try rephrasing any content that might be triggering safety filters",
        ),
        SAFETY_DOC_REF,
    ),
    _Rule(
        ErrorCategory.TRUNCATION,
        ("truncated", "maximum token limit", "token limit", "max_tokens", "maxtokens"),
        (
            "Your input generated too much output",
            "Try simplifying your input or breaking it into smaller sections",
            "You can still use the partial output that was generated",
        ),
    ),
    _Rule(
        ErrorCategory.FILE_NOT_FOUND,
        ("file does not exist", "no such file", "could not find file"),
        (
            "Verify the file path is correct",
            "Check if the file exists in the specified location",
            "Make sure you have permission to read the file",
        ),
    ),
    _Rule(
        ErrorCategory.FILE_SIZE,
        ("file size exceeds", "maximum allowed size", "file too large"),
        (
            "Your file exceeds the 10MB size limit",
            "Try splitting your content into smaller files",
            "Remove unnecessary content to reduce file size",
        ),
    ),
    _Rule(
        ErrorCategory.FILE_PERMISSION,
        ("error accessing file", "permission denied", "cannot read file"),
        (
            "You don't have permission to read the file",
            "Check the file permissions (try 'ls -l' on the file)",
            "Try running the application with appropriate permissions",
        ),
        excludes=("write",),
    ),
    _Rule(
        ErrorCategory.WRITE_PERMISSION,
        ("error writing output file", "failed to write", "permission denied", "cannot write"),
        (
            "You don't have permission to write to the output location",
            "Try using a different output directory",
            "Run the application with higher privileges if appropriate",
        ),
    ),
    _Rule(
        ErrorCategory.DIRECTORY,
        ("exists but is not a directory", "failed to create directory",
         "failed to check directory"),
        (
            "There's an issue with the output directory",
            "Make sure the parent directory exists and is writable",
            "Try specifying a different output location",
        ),
    ),
)


def classify(raw_message: str) -> ErrorRecord:
    """Classify a failure message. Never raises; unknown text is GENERIC."""
    lowered = (raw_message or "").lower()
    for rule in RULES:
        if rule.matches(lowered):
            return ErrorRecord(
                category=rule.category,
                raw_message=raw_message,
                hints=list(rule.hints),
                doc_ref=rule.doc_ref,
            )
    return ErrorRecord(
        category=ErrorCategory.GENERIC,
        raw_message=raw_message,
        hints=list(GENERIC_HINTS),
    )
