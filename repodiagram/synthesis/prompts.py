"""Prompt templates for architecture diagram synthesis."""

from __future__ import annotations

from repodiagram.synthesis.languages import DiagramLanguage

PROMPT_VERSION = "2"

_HEADER_TEMPLATE = """\
You are an expert software architect. Your task is to synthesize an architecture diagram from a complete codebase listing. The listing contains every included file as a `===== /path =====` header followed by that file's contents: source code, configuration, and documentation.

## Goal

Produce a single diagram that captures the system's most important structural and behavioral characteristics, so that a senior engineer can quickly see how the system is organized and how data flows through it.

## Expectations

1. **Architectural viewpoint**
   - Work at the level where services, modules, and components interact, not individual functions.
   - Make boundaries explicit: presentation, domain logic, infrastructure, integrations, supporting utilities.
   - Call out layered, hexagonal, microservice, or plugin structure when present.

2. **Data flow and control flow**
   - Trace the primary request/response paths and background workflows.
   - Show the critical data sources (databases, queues, caches, third-party APIs) and how data moves between them and the code.
   - Distinguish synchronous from asynchronous, batched, streaming, or event-driven interactions.

3. **Key abstractions**
   - Capture core domain entities, services, controllers, jobs, pipelines, and state machines.
   - Include configuration points (feature flags, environment-driven behavior) that shape runtime structure.

4. **Operational context**
   - Deployment topology: processes, containers, cloud services, serverless functions.
   - Logging, metrics, and tracing hooks when they materially affect the architecture.
   - Security boundaries: authentication flows, permission checks, secrets handling.

5. **Supporting details**
   - Third-party dependencies and SDKs that materially influence the design.
   - Cross-cutting concerns: error handling, validation, caching, retries.
   - Extension or plugin points.

6. **Diagram output**
   - The diagram must be written in {display_name} inside a ```{fence} fenced block.
   - Use a recognized architecture notation (C4, UML component, layered view) suited to the system's scale.
   - Provide a short legend and concise callouts for complex edges.
   - Add a paragraph explaining how to read the diagram and the key takeaways.

7. **{display_name} syntax requirements (CRITICAL)**
{syntax_rules}

8. **Process**
   - Read the directories and code thoroughly before diagramming.
   - Check assumptions against comments, docs, and configuration files.
   - State any remaining assumptions explicitly in the summary.

9. **Deliverables**
   - First, produce an outline of the components, data stores, external systems, and interactions you plan to depict.
   - Wait for confirmation before producing the final diagram.
   - After confirmation, output:
     - the {display_name} diagram,
     - a legend explaining the notation,
     - a narrative summary of the dominant architectural pattern, critical data paths, notable trade-offs, and explicit assumptions.

When you have read the whole listing, respond with the outline only. Do not produce the final diagram until the outline has been approved.

---

**Codebase Listing:**"""

_OUTLINE_APPROVAL = (
    "Outline approved. Provide the final {display_name} diagram, legend, "
    "and narrative summary now."
)

_CORRECTION_TEMPLATE = """\
The {display_name} diagram you produced has syntax errors. Fix them while keeping the architecture faithful to the codebase analysis above.

**Error from the {validator_name}:**
{error}

**CRITICAL: {display_name} syntax requirements**
{syntax_rules}

Return ONLY the corrected diagram inside a ```{fence} fenced block, with no additional explanation."""

_DIFF_TEMPLATE = """\
The repository has changed since the diagram above was produced. Below is the unified diff between the analyzed revision and the new one.

Update the {display_name} diagram so it reflects the architecture after these changes:
- Keep every component and edge that is unaffected.
- Add, remove, or rewire components and edges that the diff changes.
- Visually distinguish changed or new elements (for example with a class, style, or a "changed" note) and mention them in the legend.

Follow the same syntax requirements as before. Return the updated diagram inside a ```{fence} fenced block, followed by a short summary of the architectural impact.

```diff
{diff}
```"""


def get_prompt_header(language: DiagramLanguage) -> str:
    """Return the fixed instruction header for *language*."""
    return _HEADER_TEMPLATE.format(
        display_name=language.display_name,
        fence=language.fence,
        syntax_rules=language.syntax_rules,
    )


def build_prompt(corpus: str, language: DiagramLanguage) -> str:
    """Prepend the header for *language* to *corpus*, separated by one blank line."""
    return f"{get_prompt_header(language)}\n\n{corpus}"


def outline_approval(language: DiagramLanguage) -> str:
    return _OUTLINE_APPROVAL.format(display_name=language.display_name)


def correction_prompt(language: DiagramLanguage, error: str) -> str:
    """Ask the model to repair its last diagram, quoting the validator's *error* verbatim."""
    return _CORRECTION_TEMPLATE.format(
        display_name=language.display_name,
        validator_name=language.validator_name,
        error=error,
        syntax_rules=language.syntax_rules,
        fence=language.fence,
    )


def diff_prompt(language: DiagramLanguage, diff: str) -> str:
    return _DIFF_TEMPLATE.format(
        display_name=language.display_name, fence=language.fence, diff=diff
    )
