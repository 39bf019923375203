"""Supported diagram description languages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagramLanguage:
    """A diagram notation: how it is fenced, named, and quoted."""

    name: str
    display_name: str
    tags: tuple[str, ...]
    validator_name: str
    syntax_rules: str

    @property
    def fence(self) -> str:
        """Tag used when asking for or writing a fenced block."""
        return self.tags[0]


_MERMAID_RULES = """\
   - NEVER use unquoted labels that contain special characters; they fail to parse.
   - Labels containing ANY special character (parentheses, slashes, hyphens, spaces, colons, commas, etc.) MUST be wrapped in double quotes.
   - **INCORRECT (will fail):**
     - `A[Presentation (CLI/UI)]`
     - `B[Cloud-Name]`
     - `C[Service: API]`
   - **CORRECT:**
     - `A["Presentation (CLI/UI)"]`
     - `B["Cloud-Name"]`
     - `C["Service: API"]`
   - Simple single-word labels need no quotes: `D[User]`, `E[Database]`, `F[API_Service]`.
   - When in doubt, quote the label; quoting is always safe.
   - This applies to ALL node labels, edge labels, and other text in the diagram."""

_DOT_RULES = """\
   - Start directed graphs with `digraph G {` and undirected graphs with `graph G {`.
   - Node IDs must be identifiers (letters, digits, underscores) or quoted strings: `node1`, `API_Service`, `"Node Name"`.
   - Labels containing ANY special character (parentheses, slashes, hyphens, spaces, colons, commas, etc.) MUST be quoted: `[label="Node Label"]`.
   - **INCORRECT (will fail):**
     - `node1[label=Presentation (CLI/UI)]`
     - `node2[label=Cloud-Name]`
     - `node3[label=Service: API]`
   - **CORRECT:**
     - `node1[label="Presentation (CLI/UI)"]`
     - `node2[label="Cloud-Name"]`
     - `node3[label="Service: API"]`
   - Edges use `->` in a digraph and `--` in a graph; edge labels follow the same quoting rule.
   - Attributes use `[key=value, key2=value2]`; string values with special characters must be quoted.
   - When in doubt, quote labels and string values.
   - This applies to ALL node labels, edge labels, and other text in the diagram."""

MERMAID = DiagramLanguage(
    name="mermaid",
    display_name="Mermaid",
    tags=("mermaid",),
    validator_name="Mermaid parser",
    syntax_rules=_MERMAID_RULES,
)

DOT = DiagramLanguage(
    name="dot",
    display_name="Graphviz DOT",
    tags=("dot", "graphviz"),
    validator_name="Graphviz parser",
    syntax_rules=_DOT_RULES,
)

LANGUAGES: dict[str, DiagramLanguage] = {lang.name: lang for lang in (MERMAID, DOT)}


def get_language(name: str) -> DiagramLanguage:
    try:
        return LANGUAGES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported diagram language: {name!r}. Supported: {', '.join(LANGUAGES)}"
        ) from None
