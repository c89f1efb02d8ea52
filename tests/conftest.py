"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from resumake.clients.lifecycle import ClientLifecycle
from resumake.clients.llm_client import FinishReason, GenerationResponse, LLMClient
from resumake.models.session import Session, Stage
from resumake.pipeline.generator import ResumeGenerator

SAMPLE_RESUME_MARKDOWN = """# Jane Doe

## Summary
Backend engineer with six years of experience building payment systems.

## Experience
- **Acme Pay** (2021 - present): Senior Engineer
- **Initech** (2018 - 2021): Software Engineer

## Skills
- Python, Go, PostgreSQL
"""


def make_response(
    text: str = SAMPLE_RESUME_MARKDOWN,
    finish_reason: FinishReason = FinishReason.STOP,
    input_tokens: int = 120,
    output_tokens: int = 480,
) -> GenerationResponse:
    return GenerationResponse(
        text=text,
        finish_reason=finish_reason,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )


@pytest.fixture
def sample_source_text() -> str:
    return """Jane Doe
jane@example.com

Experience:
- Initech, Software Engineer, 2018-2021
"""


@pytest.fixture
def sample_user_input() -> str:
    return "Joined Acme Pay in 2021 as a senior engineer, led the ledger rewrite in Go."


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(return_value=make_response())
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def lifecycle(mock_llm_client) -> ClientLifecycle:
    """Lifecycle whose factory hands out the mock client."""
    return ClientLifecycle(
        factory=MagicMock(return_value=mock_llm_client),
        key_provider=lambda: "test-key",
    )


@pytest.fixture
def generator(tmp_path) -> ResumeGenerator:
    return ResumeGenerator(default_output_path=str(tmp_path / "resume_out.md"))


@pytest.fixture
def session() -> Session:
    return Session.create(api_key_valid=True)


@pytest.fixture
def session_at():
    """Build a session already sitting in the given stage."""

    def _make(stage: Stage, **fields) -> Session:
        s = Session.create(api_key_valid=True)
        s.stage = stage
        for name, value in fields.items():
            setattr(s, name, value)
        return s

    return _make
