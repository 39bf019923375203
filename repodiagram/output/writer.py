"""DiagramWriter: writes SynthesisResults to Markdown files on disk."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

import yaml

from repodiagram.config.models import OutputConfig
from repodiagram.snapshot.models import RepoRef
from repodiagram.synthesis.languages import get_language
from repodiagram.synthesis.models import SynthesisResult

logger = logging.getLogger(__name__)

INDEX_FILE = "_index.yaml"


def _sanitize_filename(name: str) -> str:
    """Make *name* safe for use as a single path component."""
    name = name.replace("/", "--").replace("\\", "--")
    name = name.replace("..", "")
    name = re.sub(r"[^\w\-\.@]", "", name)
    name = re.sub(r"-{3,}", "--", name)
    if not name or name.strip(".") == "":
        name = "_unnamed"
    return name


def _timestamp(now: datetime) -> str:
    return now.astimezone(timezone.utc).strftime("%Y%m%d-%H%M%S")


def diagram_filename(
    ref: RepoRef, model: str, now: datetime, *, diff: bool = False
) -> str:
    """Return ``<repo>-architecture-diagram-<model>-<timestamp>[-diff].md``."""
    stem = f"{ref.repo}-architecture-diagram-{model}-{_timestamp(now)}"
    if diff:
        stem += "-diff"
    return f"{_sanitize_filename(stem)}.md"


def render_markdown(
    ref: RepoRef,
    result: SynthesisResult,
    *,
    source_url: str,
    diff_head: str | None = None,
) -> str:
    fence = get_language(result.language).fence
    if diff_head is None:
        title = f"# Architecture Diagram: {ref.full_name}"
        refs = f"Ref: {ref.ref}"
        note = ""
    else:
        title = f"# Architecture Diagram (Enhanced with Diff): {ref.full_name}"
        refs = f"Base: {ref.ref}  \nHead: {diff_head}"
        note = "This diagram shows how changes in the diff impact the overall architecture.\n\n"
    return (
        f"{title}\n\n"
        f"Generated from repository: {source_url}  \n"
        f"{refs}\n\n"
        f"{note}"
        f"```{fence}\n{result.diagram}\n```\n"
    )


class DiagramWriter:
    """Writes synthesized diagrams to disk as Markdown.

    Handles filename sanitization, directory creation, optional index
    maintenance, and dry-run mode.
    """

    def __init__(self, config: OutputConfig, remote_base_url: str = "https://github.com") -> None:
        self.config = config
        self.base_dir = Path(config.base_dir)
        self.remote_base_url = remote_base_url.rstrip("/")

    def write(
        self,
        ref: RepoRef,
        result: SynthesisResult,
        *,
        diff_head: str | None = None,
        dry_run: bool = False,
        now: datetime | None = None,
    ) -> Path:
        """Write one diagram. Returns the Path of the written (or would-be) file."""
        now = now or datetime.now(timezone.utc)
        dest = self.base_dir / diagram_filename(
            ref, result.model, now, diff=diff_head is not None
        )

        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        content = render_markdown(
            ref,
            result,
            source_url=f"{self.remote_base_url}/{ref.full_name}",
            diff_head=diff_head,
        )
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(content, encoding="utf-8")
        logger.info("wrote %s (%d bytes)", dest, len(content))

        if self.config.create_index:
            key = str(ref) if diff_head is None else f"{ref}..{diff_head}"
            self._update_index(key, dest, result, now)

        return dest

    # -- index management --------------------------------------------------

    def _update_index(
        self, key: str, path: Path, result: SynthesisResult, now: datetime
    ) -> None:
        """Upsert an entry in _index.yaml for the written file."""
        index_path = self.base_dir / INDEX_FILE

        entries: list[dict] = []
        if index_path.exists():
            loaded = yaml.safe_load(index_path.read_text(encoding="utf-8"))
            if isinstance(loaded, list):
                entries = loaded

        # Hand-edited indexes may hold scalars; only mappings are entries.
        entries = [e for e in entries if isinstance(e, dict) and e.get("ref") != key]
        entries.append({
            "ref": key,
            "path": str(path),
            "language": result.language,
            "model": result.model,
            "attempts": result.attempts,
            "timestamp": now.astimezone(timezone.utc).isoformat(),
        })

        index_path.write_text(
            yaml.safe_dump(entries, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        logger.debug("updated index %s (%d entries)", index_path, len(entries))
