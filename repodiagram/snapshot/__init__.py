"""Repository snapshots: cached shallow checkouts rendered as text."""

from repodiagram.snapshot.assembler import (
    SnapshotAssembler,
    concatenate_files,
    get_directory_tree,
    iter_concatenated_files,
)
from repodiagram.snapshot.corpus import concatenate, is_binary_file, iter_corpus_chunks
from repodiagram.snapshot.git import ensure_snapshot, fetch_diff, get_workdir_path
from repodiagram.snapshot.models import (
    ConcatOptions,
    CorpusChunk,
    RepoRef,
    SnapshotResult,
    TreeOptions,
)
from repodiagram.snapshot.tree import TreeNode, build_tree, render_tree
from repodiagram.snapshot.walker import DEFAULT_IGNORES, list_included_files

__all__ = [
    "ConcatOptions",
    "CorpusChunk",
    "DEFAULT_IGNORES",
    "RepoRef",
    "SnapshotAssembler",
    "SnapshotResult",
    "TreeNode",
    "TreeOptions",
    "build_tree",
    "concatenate",
    "concatenate_files",
    "ensure_snapshot",
    "fetch_diff",
    "get_directory_tree",
    "get_workdir_path",
    "is_binary_file",
    "iter_concatenated_files",
    "iter_corpus_chunks",
    "list_included_files",
    "render_tree",
]
