"""Pydantic models for classified errors."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    AUTH = "API Authentication Error"
    QUOTA = "API Quota Error"
    NETWORK = "Network Error"
    SAFETY_FILTER = "Safety Filter Error"
    TRUNCATION = "Content Truncation Error"
    FILE_NOT_FOUND = "File Error"
    FILE_SIZE = "File Size Error"
    FILE_PERMISSION = "File Permission Error"
    WRITE_PERMISSION = "Write Permission Error"
    DIRECTORY = "Directory Error"
    GENERIC = "Error"


class ErrorRecord(BaseModel):
    category: ErrorCategory
    raw_message: str
    hints: list[str]
    doc_ref: str | None = None
