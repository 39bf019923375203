"""Pydantic models for repository snapshots."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_REPO_URL_RE = re.compile(r"github\.com/([^/]+)/([^/?#]+)")
_REPO_ID_RE = re.compile(r"^([^/\s]+)/([^/\s]+)$")


class RepoRef(BaseModel):
    """Identifies one snapshot target: a repository at a branch, tag, or SHA."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    ref: str = Field(min_length=1)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}@{self.ref}"

    @classmethod
    def parse(cls, spec: str, ref: str = "main") -> RepoRef:
        """Build a RepoRef from ``owner/repo`` or a GitHub URL.

        Raises ValueError if the format is not recognized.
        """
        spec = spec.strip()
        match = _REPO_URL_RE.search(spec) or _REPO_ID_RE.match(spec)
        if not match:
            raise ValueError(
                f"Invalid repo identifier '{spec}': expected 'owner/repo' "
                "or 'https://github.com/owner/repo'"
            )
        owner, repo = match.group(1), match.group(2)
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        return cls(owner=owner, repo=repo, ref=ref)


class SnapshotResult(BaseModel):
    """A materialized checkout and the commit it resolved to."""

    workdir: str
    commit_sha: str


class TreeOptions(BaseModel):
    """Controls which files the walker includes."""

    respect_gitignore: bool = True
    extra_ignore_globs: list[str] = Field(default_factory=list)


class ConcatOptions(TreeOptions):
    """Walker options plus per-file limits for corpus assembly."""

    max_file_size_bytes: int = Field(default=262_144, ge=0)
    treat_binary_as_ignored: bool = True


class CorpusChunk(BaseModel):
    """One file's contribution to the corpus."""

    path: str
    header: str
    body: str = ""

    @property
    def text(self) -> str:
        return self.header + self.body
