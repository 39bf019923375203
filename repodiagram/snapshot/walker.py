"""Ignore-aware directory walker.

Each directory's ``.gitignore`` is merged with the rules inherited from its
parents. Local rules are rewritten relative to the walk root so a single
matcher per directory can evaluate the whole effective rule list in
root-to-leaf order, with later negations overriding earlier matches.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

DEFAULT_IGNORES: list[str] = [
    ".git",
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".cache",
    ".venv",
]

IGNORE_FILE = ".gitignore"


def normalize_rel(path: str) -> str:
    """Convert host separators to forward slashes."""
    return path.replace("\\", "/")


def read_ignore_file(directory: Path) -> list[str] | None:
    """Return the cleaned rules of *directory*'s ignore file, or None if unreadable."""
    try:
        contents = (directory / IGNORE_FILE).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    patterns: list[str] = []
    for raw in contents.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


def prefix_patterns(dir_rel: str, patterns: list[str]) -> list[str]:
    """Rewrite *patterns* from the directory *dir_rel* so they apply from the walk root."""
    if not patterns or not dir_rel:
        return list(patterns)
    prefixed: list[str] = []
    for pattern in patterns:
        negated = pattern.startswith("!")
        base = pattern[1:] if negated else pattern
        if base.startswith("/"):
            base = base[1:]
        joined = f"{dir_rel}/{base}"
        prefixed.append(f"!{joined}" if negated else joined)
    return prefixed


@dataclass
class _Frame:
    """One directory on the walk stack, with its effective rules."""

    abs_dir: Path
    rel: str
    rules: list[str]
    spec: pathspec.PathSpec
    entries: Iterator[os.DirEntry]


def _open_frame(
    abs_dir: Path, rel: str, inherited: list[str], respect_gitignore: bool
) -> _Frame:
    local = read_ignore_file(abs_dir) if respect_gitignore else None
    rules = [*inherited, *prefix_patterns(rel, local or [])]
    with os.scandir(abs_dir) as it:
        entries = sorted(it, key=lambda e: e.name)
    return _Frame(
        abs_dir=abs_dir,
        rel=rel,
        rules=rules,
        spec=pathspec.GitIgnoreSpec.from_lines(rules),
        entries=iter(entries),
    )


def list_included_files(
    root: str | Path,
    *,
    respect_gitignore: bool = True,
    extra_ignore_globs: Iterable[str] = (),
) -> list[str]:
    """List files under *root* that survive the ignore rules.

    Returns forward-slash relative paths in depth-first, name-sorted order.
    """
    root_rules = [*DEFAULT_IGNORES, *extra_ignore_globs]
    collected: list[str] = []
    stack = [_open_frame(Path(root), "", root_rules, respect_gitignore)]

    while stack:
        frame = stack[-1]
        entry = next(frame.entries, None)
        if entry is None:
            stack.pop()
            continue

        child_rel = f"{frame.rel}/{entry.name}" if frame.rel else entry.name
        is_dir = entry.is_dir(follow_symlinks=False)
        check = normalize_rel(f"{child_rel}/" if is_dir else child_rel)
        if frame.spec.match_file(check):
            continue

        if is_dir:
            stack.append(
                _open_frame(Path(entry.path), child_rel, frame.rules, respect_gitignore)
            )
        elif entry.is_file(follow_symlinks=False):
            collected.append(normalize_rel(child_rel))

    logger.debug("walked %s: %d files included", root, len(collected))
    return collected
