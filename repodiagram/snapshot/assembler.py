"""Snapshot assembler: fetch, walk, and render a repository at a ref."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from repodiagram.config.models import SnapshotConfig
from repodiagram.snapshot.corpus import iter_corpus_chunks
from repodiagram.snapshot.git import ensure_snapshot
from repodiagram.snapshot.models import ConcatOptions, RepoRef, TreeOptions
from repodiagram.snapshot.tree import render_tree
from repodiagram.snapshot.walker import list_included_files

logger = logging.getLogger(__name__)


class SnapshotAssembler:
    """Turns a RepoRef into a directory tree or a text corpus.

    Pipeline:
        RepoRef → ensure_snapshot → list_included_files → render_tree | corpus chunks
    """

    def __init__(self, config: SnapshotConfig | None = None) -> None:
        self.config = config or SnapshotConfig()

    def default_concat_options(self) -> ConcatOptions:
        return ConcatOptions(
            respect_gitignore=self.config.respect_gitignore,
            extra_ignore_globs=list(self.config.extra_ignore_globs),
            max_file_size_bytes=self.config.max_file_size_bytes,
            treat_binary_as_ignored=self.config.treat_binary_as_ignored,
        )

    async def _walk(self, ref: RepoRef, options: TreeOptions) -> tuple[str, list[str]]:
        snapshot = await ensure_snapshot(ref, self.config)
        files = await asyncio.to_thread(
            list_included_files,
            snapshot.workdir,
            respect_gitignore=options.respect_gitignore,
            extra_ignore_globs=options.extra_ignore_globs,
        )
        return snapshot.workdir, files

    async def directory_tree(self, ref: RepoRef, options: TreeOptions | None = None) -> str:
        """Render the included files of *ref* as an ASCII tree."""
        _, files = await self._walk(ref, options or self.default_concat_options())
        return render_tree(files)

    async def iter_corpus(
        self, ref: RepoRef, options: ConcatOptions | None = None
    ) -> AsyncIterator[str]:
        """Yield corpus chunks for *ref* one file at a time."""
        opts = options or self.default_concat_options()
        workdir, files = await self._walk(ref, opts)
        for chunk in iter_corpus_chunks(workdir, files, opts):
            yield chunk.text

    async def concatenate(self, ref: RepoRef, options: ConcatOptions | None = None) -> str:
        """Return the full corpus for *ref*."""
        parts = [chunk async for chunk in self.iter_corpus(ref, options)]
        corpus = "".join(parts)
        logger.info("assembled corpus for %s: %d files, %d chars", ref, len(parts), len(corpus))
        return corpus


async def get_directory_tree(ref: RepoRef, options: TreeOptions | None = None) -> str:
    return await SnapshotAssembler().directory_tree(ref, options)


async def iter_concatenated_files(
    ref: RepoRef, options: ConcatOptions | None = None
) -> AsyncIterator[str]:
    async for chunk in SnapshotAssembler().iter_corpus(ref, options):
        yield chunk


async def concatenate_files(ref: RepoRef, options: ConcatOptions | None = None) -> str:
    """Default repository fetcher: snapshot *ref* and return its corpus."""
    return await SnapshotAssembler().concatenate(ref, options)
