"""Shallow git checkouts cached per (owner, repo, ref)."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path

from repodiagram.config.models import SnapshotConfig
from repodiagram.errors import FetchError
from repodiagram.snapshot.models import RepoRef, SnapshotResult

logger = logging.getLogger(__name__)

_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


def get_workdir_path(ref: RepoRef, cache_dir: str | Path) -> Path:
    """Return the working directory reserved for *ref* under *cache_dir*."""
    return Path(cache_dir) / ref.owner / ref.repo / ref.ref


def remote_url(ref: RepoRef, remote_base_url: str = "https://github.com") -> str:
    return f"{remote_base_url.rstrip('/')}/{ref.owner}/{ref.repo}.git"


def _run_git(args: list[str], cwd: Path, allow_failure: bool = False) -> str | None:
    """Run a git subcommand in *cwd* and return its stdout.

    Returns None instead of raising when *allow_failure* is set.
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        if allow_failure:
            logger.debug("ignoring failure of git %s: %s", " ".join(args), e.stderr)
            return None
        raise FetchError(args, e.returncode, e.stderr or "") from e
    if len(result.stdout) > _MAX_OUTPUT_BYTES:
        raise FetchError(args, 0, "output exceeded 10 MiB")
    return result.stdout


def _ensure_repo_at_ref(ref: RepoRef, config: SnapshotConfig) -> SnapshotResult:
    workdir = get_workdir_path(ref, config.cache_dir)
    workdir.mkdir(parents=True, exist_ok=True)

    _run_git(["init", "--quiet"], workdir)

    # origin may not exist yet on a fresh workdir
    _run_git(["remote", "remove", "origin"], workdir, allow_failure=True)
    _run_git(["remote", "add", "origin", remote_url(ref, config.remote_base_url)], workdir)

    _run_git(["fetch", "--quiet", "--depth", "1", "origin", ref.ref], workdir)
    _run_git(["checkout", "--quiet", "--detach", "FETCH_HEAD"], workdir)

    commit_sha = (_run_git(["rev-parse", "HEAD"], workdir) or "").strip()
    logger.info("snapshot %s at %s in %s", ref, commit_sha[:12], workdir)
    return SnapshotResult(workdir=str(workdir), commit_sha=commit_sha)


async def ensure_snapshot(
    ref: RepoRef, config: SnapshotConfig | None = None
) -> SnapshotResult:
    """Materialize a detached, depth-1 checkout of *ref* and resolve its commit.

    Safe to call repeatedly for the same ref: the workdir, repository and
    remote are reused or reset. Concurrent calls for the same ref race on
    the same directory and must be serialized by the caller.
    """
    cfg = config or SnapshotConfig()
    return await asyncio.to_thread(_ensure_repo_at_ref, ref, cfg)


def _diff_against(ref: RepoRef, head_ref: str, config: SnapshotConfig) -> str:
    snapshot = _ensure_repo_at_ref(ref, config)
    workdir = Path(snapshot.workdir)
    _run_git(["fetch", "--quiet", "--depth", "1", "origin", head_ref], workdir)
    return _run_git(["diff", "HEAD", "FETCH_HEAD"], workdir) or ""


async def fetch_diff(
    ref: RepoRef, head_ref: str, config: SnapshotConfig | None = None
) -> str:
    """Return the unified diff from *ref* to *head_ref* in the same repository."""
    cfg = config or SnapshotConfig()
    return await asyncio.to_thread(_diff_against, ref, head_ref, cfg)
