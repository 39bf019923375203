import tempfile
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


def _default_cache_dir() -> str:
    return str(Path(tempfile.gettempdir()) / "repodiagram" / "github-cache")


class LLMSettings(BaseModel):
    provider: Literal["openai", "anthropic"] = "openai"
    model: str = "gpt-5"
    api_key_env: str = "OPENAI_API_KEY"
    max_tokens: int = 16384
    timeout: int = 600
    base_url: str | None = None


class SnapshotConfig(BaseModel):
    remote_base_url: str = "https://github.com"
    cache_dir: str = Field(default_factory=_default_cache_dir)
    respect_gitignore: bool = True
    extra_ignore_globs: list[str] = []
    max_file_size_bytes: int = Field(default=262_144, ge=0)
    treat_binary_as_ignored: bool = True


class SynthesisConfig(BaseModel):
    language: Literal["mermaid", "dot"] = "mermaid"
    max_attempts: int = Field(default=3, ge=1)
    mermaid_cli: str = "mmdc"
    dot_cli: str = "dot"


class OutputConfig(BaseModel):
    base_dir: str = ".diagrams"
    create_index: bool = True


class RepoDiagramConfig(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
