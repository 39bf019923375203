"""External syntax checkers for diagram text.

A validator returns None when the diagram parses and a human-readable error
string otherwise. Validators never raise for invalid input; the synthesis
loop feeds the string back to the model.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable

from repodiagram.config.models import SynthesisConfig
from repodiagram.synthesis.languages import DOT, MERMAID, DiagramLanguage

logger = logging.getLogger(__name__)

_VALIDATOR_TIMEOUT = 60


class DiagramValidator(ABC):
    """Checks diagram text for syntax errors."""

    @abstractmethod
    async def validate(self, diagram: str) -> str | None:
        """Return None if *diagram* is valid, else the error text."""
        ...


class CallableValidator(DiagramValidator):
    """Adapts a plain function (e.g. an in-process parser) to DiagramValidator."""

    def __init__(self, check: Callable[[str], str | None]) -> None:
        self._check = check

    async def validate(self, diagram: str) -> str | None:
        return self._check(diagram)


class CommandValidator(DiagramValidator):
    """Pipes the diagram to a command-line tool on stdin.

    A non-zero exit is always a failure; with ``stderr_is_error`` any stderr
    output counts as one too.
    """

    def __init__(
        self,
        argv: list[str],
        *,
        missing_hint: str,
        error_prefix: str,
        stderr_is_error: bool = False,
    ) -> None:
        self.argv = argv
        self.missing_hint = missing_hint
        self.error_prefix = error_prefix
        self.stderr_is_error = stderr_is_error

    def _run(self, diagram: str) -> str | None:
        if shutil.which(self.argv[0]) is None:
            return f"'{self.argv[0]}' command not found. {self.missing_hint}"
        try:
            result = subprocess.run(
                self.argv,
                input=diagram,
                capture_output=True,
                text=True,
                timeout=_VALIDATOR_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            return f"{self.error_prefix}: validator timed out after {_VALIDATOR_TIMEOUT}s"

        stderr = result.stderr.strip()
        if result.returncode != 0 or (self.stderr_is_error and stderr):
            detail = stderr or f"exit status {result.returncode}"
            return f"{self.error_prefix}: {detail}"
        return None

    async def validate(self, diagram: str) -> str | None:
        error = await asyncio.to_thread(self._run, diagram)
        if error:
            logger.debug("%s rejected diagram: %s", self.argv[0], error)
        return error


def dot_validator(executable: str = "dot") -> CommandValidator:
    """Validate Graphviz DOT by round-tripping it through ``dot -Tdot``."""
    return CommandValidator(
        [executable, "-Tdot"],
        missing_hint=(
            "Please install Graphviz. On macOS: brew install graphviz, "
            "on Ubuntu/Debian: sudo apt-get install graphviz, "
            "on Windows: choco install graphviz or see https://graphviz.org/download/"
        ),
        error_prefix="DOT syntax validation failed",
        stderr_is_error=True,
    )


def mermaid_validator(executable: str = "mmdc") -> CommandValidator:
    """Validate Mermaid by rendering it with mermaid-cli and discarding the output."""
    return CommandValidator(
        [executable, "--quiet", "--input", "-", "--output", "-", "--outputFormat", "svg"],
        missing_hint="Please install mermaid-cli: npm install -g @mermaid-js/mermaid-cli",
        error_prefix="Mermaid syntax validation failed",
    )


def default_validator(
    language: DiagramLanguage, config: SynthesisConfig | None = None
) -> DiagramValidator:
    """Return the stock validator for *language*."""
    cfg = config or SynthesisConfig()
    if language.name == DOT.name:
        return dot_validator(cfg.dot_cli)
    if language.name == MERMAID.name:
        return mermaid_validator(cfg.mermaid_cli)
    raise ValueError(f"No validator available for {language.display_name}")
