"""ASCII tree rendering for walked file lists."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class TreeNode:
    """A directory: subdirectories by name plus the files directly inside it."""

    name: str
    children: dict[str, TreeNode] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)

    def sort(self) -> None:
        """Sort files and subdirectories in place, recursively."""
        self.files.sort()
        self.children = dict(sorted(self.children.items()))
        for child in self.children.values():
            child.sort()


def build_tree(paths: Iterable[str]) -> TreeNode:
    """Build a sorted TreeNode hierarchy from forward-slash relative paths."""
    root = TreeNode(name="")
    for rel in paths:
        *dirs, filename = rel.split("/")
        node = root
        for part in dirs:
            node = node.children.setdefault(part, TreeNode(name=part))
        node.files.append(filename)
    root.sort()
    return root


def render_tree(tree: TreeNode | Iterable[str]) -> str:
    """Render a tree with box-drawing connectors, directories before files.

    Accepts either a built TreeNode or the flat path list. The root itself
    is not listed.
    """
    root = tree if isinstance(tree, TreeNode) else build_tree(tree)
    lines: list[str] = []

    def _render_dir(node: TreeNode, prefix: str) -> None:
        entries: list[tuple[str, TreeNode | None]] = [
            *node.children.items(),
            *((name, None) for name in node.files),
        ]
        for index, (name, child) in enumerate(entries):
            is_last = index == len(entries) - 1
            lines.append(f"{prefix}{'└── ' if is_last else '├── '}{name}")
            if child is not None:
                _render_dir(child, prefix + ("    " if is_last else "│   "))

    _render_dir(root, "")
    return "\n".join(lines)
