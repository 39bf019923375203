"""Diagram synthesis: prompt, extract, validate, correct."""

from repodiagram.synthesis.controller import (
    DiagramSynthesizer,
    RepositoryFetcher,
    generate_diagram,
)
from repodiagram.synthesis.extract import extract_diagram
from repodiagram.synthesis.languages import DOT, LANGUAGES, MERMAID, DiagramLanguage, get_language
from repodiagram.synthesis.models import SynthesisResult, SynthesisState
from repodiagram.synthesis.prompts import PROMPT_VERSION, build_prompt, get_prompt_header
from repodiagram.synthesis.validators import (
    CallableValidator,
    CommandValidator,
    DiagramValidator,
    default_validator,
    dot_validator,
    mermaid_validator,
)

__all__ = [
    "CallableValidator",
    "CommandValidator",
    "DOT",
    "DiagramLanguage",
    "DiagramSynthesizer",
    "DiagramValidator",
    "LANGUAGES",
    "MERMAID",
    "PROMPT_VERSION",
    "RepositoryFetcher",
    "SynthesisResult",
    "SynthesisState",
    "build_prompt",
    "default_validator",
    "dot_validator",
    "extract_diagram",
    "generate_diagram",
    "get_language",
    "get_prompt_header",
    "mermaid_validator",
]
