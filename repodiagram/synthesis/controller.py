"""Diagram synthesis: prompt, extract, validate, and repair.

Pipeline:
    RepoRef → fetcher → build_prompt → outline/final turns → model
    → extract_diagram → validator → (correction turn → model)* → SynthesisResult
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from repodiagram.config.models import RepoDiagramConfig, SynthesisConfig
from repodiagram.errors import DiagramValidationError, RepoDiagramError
from repodiagram.llm import create_llm_provider
from repodiagram.llm.base import LLMProvider
from repodiagram.llm.models import Conversation
from repodiagram.llm.responses import extract_text
from repodiagram.snapshot.assembler import SnapshotAssembler, concatenate_files
from repodiagram.snapshot.models import RepoRef
from repodiagram.synthesis.extract import extract_diagram
from repodiagram.synthesis.languages import DiagramLanguage, get_language
from repodiagram.synthesis.models import SynthesisResult, SynthesisState
from repodiagram.synthesis.prompts import (
    build_prompt,
    correction_prompt,
    diff_prompt,
    outline_approval,
)
from repodiagram.synthesis.validators import DiagramValidator, default_validator

logger = logging.getLogger(__name__)

RepositoryFetcher = Callable[[RepoRef], Awaitable[str]]


class DiagramSynthesizer:
    """Drives one model conversation per request until a diagram validates.

    The repository fetcher, provider, and validator are all constructor
    arguments; nothing is swapped through module state.
    """

    def __init__(
        self,
        llm: LLMProvider,
        config: SynthesisConfig | None = None,
        *,
        language: DiagramLanguage | None = None,
        fetcher: RepositoryFetcher | None = None,
        validator: DiagramValidator | None = None,
    ) -> None:
        self.llm = llm
        self.config = config or SynthesisConfig()
        self.language = language or get_language(self.config.language)
        self.fetcher = fetcher or concatenate_files
        self.validator = validator or default_validator(self.language, self.config)

    def _enter(self, state: SynthesisState, detail: object = "") -> None:
        logger.debug("synthesis -> %s %s", state.value, detail)

    async def generate(self, ref: RepoRef) -> SynthesisResult:
        """Produce a validated diagram for *ref*.

        Seeds the conversation with the full prompt and an outline approval,
        so the model plans before it commits to a diagram.
        """
        self._enter(SynthesisState.FETCHING_SNAPSHOT, ref)
        corpus = await self.fetcher(ref)

        self._enter(SynthesisState.REQUESTING_OUTLINE)
        conversation = Conversation().append("user", build_prompt(corpus, self.language))
        self._enter(SynthesisState.REQUESTING_FINAL)
        conversation = conversation.append("user", outline_approval(self.language))

        logger.info(
            "requesting %s diagram for %s (%d corpus chars, model %s)",
            self.language.display_name,
            ref,
            len(corpus),
            self.llm.config.model,
        )
        return await self._complete(conversation)

    async def enhance_with_diff(self, conversation: Conversation, diff: str) -> SynthesisResult:
        """Update the diagram from a previous transcript to reflect *diff*."""
        if not diff.strip():
            raise ValueError("Cannot enhance a diagram with an empty diff")
        conversation = conversation.append("user", diff_prompt(self.language, diff))
        logger.info("requesting diff-enhanced %s diagram", self.language.display_name)
        return await self._complete(conversation)

    async def _ask(self, conversation: Conversation) -> Conversation:
        response = await self.llm.respond(conversation)
        extracted = extract_text(response)
        logger.debug(
            "response %s (%s, %d chars)",
            extracted.response_id,
            extracted.source,
            len(extracted.text),
        )
        return conversation.append("assistant", extracted.text)

    async def _complete(self, conversation: Conversation) -> SynthesisResult:
        max_attempts = self.config.max_attempts
        try:
            conversation = await self._ask(conversation)
            for attempt in range(1, max_attempts + 1):
                self._enter(SynthesisState.EXTRACTING, f"attempt {attempt}")
                diagram = extract_diagram(conversation.last.content, self.language)

                self._enter(SynthesisState.VALIDATING, f"attempt {attempt}")
                error = await self.validator.validate(diagram)
                if error is None:
                    self._enter(SynthesisState.SUCCESS)
                    return SynthesisResult(
                        diagram=diagram,
                        language=self.language.name,
                        model=self.llm.config.model,
                        attempts=attempt,
                        conversation=conversation,
                    )

                logger.warning(
                    "invalid %s diagram on attempt %d/%d: %s",
                    self.language.display_name,
                    attempt,
                    max_attempts,
                    error,
                )
                if attempt == max_attempts:
                    raise DiagramValidationError(self.language.display_name, max_attempts, error)

                self._enter(SynthesisState.CORRECTING)
                conversation = conversation.append(
                    "user", correction_prompt(self.language, error)
                )
                conversation = await self._ask(conversation)
        except RepoDiagramError:
            self._enter(SynthesisState.FAILED)
            raise
        raise AssertionError("unreachable: attempt loop exited without a result")


async def generate_diagram(
    ref: RepoRef,
    config: RepoDiagramConfig | None = None,
    *,
    llm: LLMProvider | None = None,
    model: str | None = None,
    language: DiagramLanguage | None = None,
    fetcher: RepositoryFetcher | None = None,
    validator: DiagramValidator | None = None,
) -> SynthesisResult:
    """Generate a validated architecture diagram for *ref*.

    Without an injected *llm*, a provider is built from ``config.llm``,
    which requires its API key environment variable to be set.
    """
    cfg = config or RepoDiagramConfig()
    provider = llm or create_llm_provider(cfg.llm, model=model)
    if fetcher is None:
        fetcher = SnapshotAssembler(cfg.snapshot).concatenate
    synthesizer = DiagramSynthesizer(
        provider,
        cfg.synthesis,
        language=language,
        fetcher=fetcher,
        validator=validator,
    )
    return await synthesizer.generate(ref)
