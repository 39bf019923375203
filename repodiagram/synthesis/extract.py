"""Fenced diagram block extraction."""

from __future__ import annotations

import re

from repodiagram.errors import DiagramNotFoundError
from repodiagram.synthesis.languages import DiagramLanguage


def _fence_pattern(language: DiagramLanguage) -> re.Pattern[str]:
    tags = "|".join(re.escape(tag) for tag in language.tags)
    return re.compile(rf"```(?:{tags})\b\s*(.*?)```", re.IGNORECASE | re.DOTALL)


def extract_diagram(text: str, language: DiagramLanguage) -> str:
    """Return the trimmed body of the first ```<tag> block for *language*.

    Raises DiagramNotFoundError if no block is present or the first one is empty.
    """
    match = _fence_pattern(language).search(text)
    if match:
        diagram = match.group(1).strip()
        if diagram:
            return diagram
    raise DiagramNotFoundError(
        f"Unable to locate {language.display_name} diagram in model response."
    )
