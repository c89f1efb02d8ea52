"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

STALE_FILE_ERROR_POLICIES = ("honor", "ignore")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 8192
    temperature: float = 0.7
    timeout: int = 120

    def __post_init__(self) -> None:
        if not 1 <= self.max_tokens <= 64000:
            raise ValueError(f"max_tokens must be between 1 and 64000, got {self.max_tokens}")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be between 0.0 and 1.0, got {self.temperature}")
        if self.timeout < 1:
            raise ValueError(f"timeout must be at least 1 second, got {self.timeout}")


@dataclass(frozen=True)
class InputConfig:
    max_file_size: int = 10 * 1024 * 1024
    supported_extensions: tuple[str, ...] = (".txt", ".md", ".markdown")

    def __post_init__(self) -> None:
        if self.max_file_size < 1:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")
        # YAML gives lists; keep the dataclass hashable
        object.__setattr__(self, "supported_extensions", tuple(self.supported_extensions))


@dataclass(frozen=True)
class OutputConfig:
    default_path: str = "resume_out.md"


@dataclass(frozen=True)
class WizardConfig:
    stale_file_errors: str = "honor"
    tick_interval: float = 0.1

    def __post_init__(self) -> None:
        if self.stale_file_errors not in STALE_FILE_ERROR_POLICIES:
            raise ValueError(
                f"stale_file_errors must be one of {STALE_FILE_ERROR_POLICIES}, "
                f"got {self.stale_file_errors!r}"
            )
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")


@dataclass(frozen=True)
class UsageConfig:
    enabled: bool = True
    db_path: str = "~/.resumake/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    wizard: WizardConfig = field(default_factory=WizardConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        input=InputConfig(**raw.get("input", {})),
        output=OutputConfig(**raw.get("output", {})),
        wizard=WizardConfig(**raw.get("wizard", {})),
        usage=UsageConfig(**raw.get("usage", {})),
    )
