"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

SCORING_STRATEGIES = ("tag_overlap", "llm")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    max_retries: int = 3
    timeout: int = 60

    def __post_init__(self):
        if not 1 <= self.max_retries <= 10:
            raise ValueError(f"llm.max_retries must be between 1 and 10, got {self.max_retries}")
        if self.timeout < 1:
            raise ValueError(f"llm.timeout must be at least 1 second, got {self.timeout}")


@dataclass(frozen=True)
class MatchingConfig:
    strategy: str = "tag_overlap"
    scoring_timeout: float = 90.0

    def __post_init__(self):
        if self.strategy not in SCORING_STRATEGIES:
            raise ValueError(
                f"matching.strategy must be one of {', '.join(SCORING_STRATEGIES)}, got {self.strategy!r}"
            )
        if self.scoring_timeout <= 0:
            raise ValueError(f"matching.scoring_timeout must be positive, got {self.scoring_timeout}")


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.resume-pipeline/library.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class OutputConfig:
    resumes_dir: str = "./public/resumes"
    public_root: str = "/resumes"

    @property
    def resolved_resumes_dir(self) -> Path:
        return Path(self.resumes_dir).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent.parent / "config.yaml",
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
        matching=MatchingConfig(**raw.get("matching", {})),
        storage=StorageConfig(**raw.get("storage", {})),
        output=OutputConfig(**raw.get("output", {})),
    )
