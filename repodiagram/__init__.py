"""repodiagram - architecture diagrams for GitHub repositories, drafted by an LLM and checked by a parser."""

from repodiagram.config import RepoDiagramConfig, load_config
from repodiagram.errors import (
    DiagramNotFoundError,
    DiagramValidationError,
    FetchError,
    RepoDiagramError,
    ResponseShapeError,
)
from repodiagram.llm import LLMProvider, create_llm_provider
from repodiagram.output import DiagramWriter
from repodiagram.snapshot import (
    RepoRef,
    SnapshotAssembler,
    concatenate_files,
    ensure_snapshot,
    get_directory_tree,
    iter_concatenated_files,
)
from repodiagram.synthesis import DiagramSynthesizer, SynthesisResult, build_prompt, generate_diagram

__version__ = "0.1.0"

__all__ = [
    "DiagramNotFoundError",
    "DiagramSynthesizer",
    "DiagramValidationError",
    "DiagramWriter",
    "FetchError",
    "LLMProvider",
    "RepoDiagramConfig",
    "RepoDiagramError",
    "RepoRef",
    "ResponseShapeError",
    "SnapshotAssembler",
    "SynthesisResult",
    "build_prompt",
    "concatenate_files",
    "create_llm_provider",
    "ensure_snapshot",
    "generate_diagram",
    "get_directory_tree",
    "iter_concatenated_files",
    "load_config",
]
