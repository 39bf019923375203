"""Output subsystem: writes and indexes diagram Markdown files."""

from repodiagram.output.writer import DiagramWriter, diagram_filename, render_markdown

__all__ = [
    "DiagramWriter",
    "diagram_filename",
    "render_markdown",
]
