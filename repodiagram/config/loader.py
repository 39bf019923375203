"""Config file discovery and parsing for repodiagram."""

import os
import re
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import RepoDiagramConfig

PROJECT_CONFIG = "repodiagram.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def _candidate_paths(cli_path: str | None) -> Iterator[Path]:
    if cli_path:
        yield Path(cli_path)
    yield Path(".") / PROJECT_CONFIG
    yield Path.home() / ".repodiagram" / "config.yaml"


def _read_config_file(path: Path) -> RepoDiagramConfig | None:
    """Parse one config file; None means the file is empty and should be skipped."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping")
    try:
        return RepoDiagramConfig.model_validate(_expand_env_vars(data))
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def load_config(cli_path: str | None = None) -> RepoDiagramConfig:
    """Return the first non-empty config among --config, ./repodiagram.yaml and
    ~/.repodiagram/config.yaml, falling back to defaults.

    Files are not merged. Raises ValueError naming the file on bad YAML or
    schema violations.
    """
    for path in _candidate_paths(cli_path):
        if not path.is_file():
            continue
        config = _read_config_file(path)
        if config is not None:
            return config
    return RepoDiagramConfig()


def _expand_env_vars(obj: object) -> object:
    """Substitute ${VAR} in every string of a parsed YAML tree; unset vars become ''."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Written by `repodiagram config init`
DEFAULT_CONFIG_TEMPLATE = """\
# repodiagram.yaml

# Language model
llm:
  provider: "openai"           # openai | anthropic
  model: "gpt-5"
  api_key_env: "OPENAI_API_KEY"
  max_tokens: 16384
  timeout: 600
  # base_url: "https://api.openai.com/v1"

# Repository snapshots
snapshot:
  remote_base_url: "https://github.com"
  # cache_dir: "/tmp/repodiagram/github-cache"
  respect_gitignore: true
  extra_ignore_globs: []
  max_file_size_bytes: 262144
  treat_binary_as_ignored: true

# Diagram synthesis
synthesis:
  language: "mermaid"          # mermaid | dot
  max_attempts: 3
  mermaid_cli: "mmdc"
  dot_cli: "dot"

# Output
output:
  base_dir: ".diagrams"
  create_index: true

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
