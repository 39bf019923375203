"""Corpus assembly: walked files concatenated behind path headers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from repodiagram.snapshot.models import ConcatOptions, CorpusChunk
from repodiagram.snapshot.walker import normalize_rel

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8192
BINARY_THRESHOLD = 0.3

_PRINTABLE = frozenset({9, 10, 13, *range(32, 127)})


def is_binary_bytes(data: bytes) -> bool:
    """Classify a leading byte sample as binary.

    A NUL byte anywhere is conclusive; otherwise the sample is binary when
    more than 30% of it falls outside tab/newline/CR and printable ASCII.
    """
    sample = data[:BINARY_SNIFF_BYTES]
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    suspicious = sum(1 for byte in sample if byte not in _PRINTABLE)
    return suspicious / len(sample) > BINARY_THRESHOLD


def is_binary_file(path: Path) -> bool:
    """Sniff *path*; unreadable files count as binary."""
    try:
        with open(path, "rb") as f:
            return is_binary_bytes(f.read(BINARY_SNIFF_BYTES))
    except OSError:
        return True


def chunk_header(rel: str) -> str:
    return f"===== /{normalize_rel(rel)} =====\n"


def iter_corpus_chunks(
    root: str | Path,
    paths: Iterable[str],
    options: ConcatOptions | None = None,
) -> Iterator[CorpusChunk]:
    """Yield one chunk per included file, in *paths* order.

    Oversized files are dropped without a placeholder. Binary files are
    dropped, or emitted with an empty body when
    ``treat_binary_as_ignored`` is off. Single pass: re-walk to restart.
    """
    opts = options or ConcatOptions()
    base = Path(root)
    for rel in paths:
        abs_path = base / rel
        size = abs_path.stat().st_size
        if size > opts.max_file_size_bytes:
            logger.debug("Skipping %s: too large (%d bytes)", rel, size)
            continue

        binary = is_binary_file(abs_path)
        if binary and opts.treat_binary_as_ignored:
            logger.debug("Skipping binary file: %s", rel)
            continue

        content = "" if binary else abs_path.read_bytes().decode("utf-8", errors="replace")
        if not content.endswith("\n"):
            content += "\n"
        yield CorpusChunk(path=normalize_rel(rel), header=chunk_header(rel), body=content)


def concatenate(
    root: str | Path,
    paths: Iterable[str],
    options: ConcatOptions | None = None,
) -> str:
    """Join every chunk's text; identical to consuming iter_corpus_chunks."""
    return "".join(chunk.text for chunk in iter_corpus_chunks(root, paths, options))
