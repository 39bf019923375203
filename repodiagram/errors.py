"""Exception types raised across repodiagram."""

from __future__ import annotations


class RepoDiagramError(Exception):
    """Base class for all repodiagram failures."""


class FetchError(RepoDiagramError):
    """A git command failed while materializing a snapshot."""

    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(
            f"git {' '.join(command)} exited with status {returncode}{detail}"
        )


class ResponseShapeError(RepoDiagramError, ValueError):
    """The model response carried no extractable text."""


class DiagramNotFoundError(RepoDiagramError, ValueError):
    """No fenced diagram block was found in the model output."""


class DiagramValidationError(RepoDiagramError):
    """The diagram still failed validation when no attempts were left."""

    def __init__(self, language: str, attempts: int, last_error: str) -> None:
        self.language = language
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to generate valid {language} diagram after {attempts} attempts. "
            f"Last error: {last_error}"
        )
