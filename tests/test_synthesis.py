"""Tests for DiagramSynthesizer: prompting, retries, and diff enhancement."""

import os
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from repodiagram.config.models import RepoDiagramConfig, SynthesisConfig
from repodiagram.errors import (
    DiagramNotFoundError,
    DiagramValidationError,
    ResponseShapeError,
)
from repodiagram.llm.base import LLMProvider
from repodiagram.llm.models import Conversation, LLMConfig
from repodiagram.llm.responses import FlatResponse, StructuredResponse, normalize_response
from repodiagram.synthesis.controller import DiagramSynthesizer, generate_diagram
from repodiagram.synthesis.languages import DOT, MERMAID
from repodiagram.synthesis.prompts import build_prompt, outline_approval
from repodiagram.synthesis.validators import DiagramValidator


def _flat(text, response_id="resp"):
    return FlatResponse(id=response_id, status="completed", output_text=text)


def _validator(*results):
    validator = MagicMock(spec=DiagramValidator)
    validator.validate = AsyncMock(side_effect=list(results))
    return validator


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestGenerate:
    async def test_success_on_first_attempt(
        self, mock_llm_provider, fake_fetcher, accepting_validator, synthesis_config, sample_ref
    ):
        synth = DiagramSynthesizer(
            mock_llm_provider,
            synthesis_config,
            fetcher=fake_fetcher,
            validator=accepting_validator,
        )
        result = await synth.generate(sample_ref)

        assert result.diagram == 'graph TD\n  A["CLI"] --> B["Snapshot Assembler"]'
        assert result.attempts == 1
        assert result.language == "mermaid"
        assert result.model == "test-model"
        fake_fetcher.assert_awaited_once_with(sample_ref)
        mock_llm_provider.respond.assert_awaited_once()

    async def test_conversation_seeded_with_two_user_turns(
        self, mock_llm_provider, fake_fetcher, accepting_validator, sample_ref
    ):
        synth = DiagramSynthesizer(
            mock_llm_provider, fetcher=fake_fetcher, validator=accepting_validator
        )
        result = await synth.generate(sample_ref)

        sent = mock_llm_provider.respond.call_args.args[0]
        assert [m.role for m in sent.messages] == ["user", "user"]
        assert sent.messages[0].content == build_prompt(fake_fetcher.return_value, MERMAID)
        assert sent.messages[1].content == outline_approval(MERMAID)

        # the reply is appended to the returned transcript
        assert [m.role for m in result.conversation.messages] == ["user", "user", "assistant"]

    async def test_language_from_config(self, mock_llm_provider, fake_fetcher, accepting_validator):
        synth = DiagramSynthesizer(
            mock_llm_provider,
            SynthesisConfig(language="dot"),
            fetcher=fake_fetcher,
            validator=accepting_validator,
        )
        assert synth.language is DOT

    async def test_structured_output_dot(self, fake_fetcher, accepting_validator, sample_ref):
        provider = MagicMock(spec=LLMProvider)
        provider.config = LLMConfig(provider="openai", model="gpt-5")
        provider.respond = AsyncMock(return_value=normalize_response({
            "id": "resp_s",
            "status": "completed",
            "output": [
                {
                    "type": "message",
                    "content": [{"type": "output_text", "text": "```dot\ndigraph G {}\n```"}],
                }
            ],
        }))
        synth = DiagramSynthesizer(
            provider, language=DOT, fetcher=fake_fetcher, validator=accepting_validator
        )
        result = await synth.generate(sample_ref)
        assert result.diagram == "digraph G {}"
        assert result.language == "dot"


# ---------------------------------------------------------------------------
# Correction loop
# ---------------------------------------------------------------------------


class TestCorrectionLoop:
    async def test_two_call_correction(self, fake_fetcher, sample_ref):
        provider = MagicMock(spec=LLMProvider)
        provider.config = LLMConfig(provider="openai", model="gpt-5")
        provider.respond = AsyncMock(side_effect=[
            _flat("```mermaid\ngraph TD\nA[Bad (x)]\n```", "r1"),
            _flat("```mermaid\ngraph TD\nA[\"Good (x)\"]\n```", "r2"),
        ])
        validator = _validator("Parse error on line 2", None)

        synth = DiagramSynthesizer(provider, fetcher=fake_fetcher, validator=validator)
        result = await synth.generate(sample_ref)

        assert result.diagram == 'graph TD\nA["Good (x)"]'
        assert result.attempts == 2
        assert provider.respond.await_count == 2

        second_call = provider.respond.call_args_list[1].args[0]
        assert [m.role for m in second_call.messages] == ["user", "user", "assistant", "user"]
        correction = second_call.messages[-1].content
        assert "Parse error on line 2" in correction
        assert "INCORRECT" in correction

        assert [m.role for m in result.conversation.messages] == [
            "user", "user", "assistant", "user", "assistant",
        ]

    async def test_exhaustion_after_max_attempts(self, mock_llm_provider, fake_fetcher, sample_ref):
        validator = _validator("err 1", "err 2", "err 3")
        synth = DiagramSynthesizer(
            mock_llm_provider,
            SynthesisConfig(max_attempts=3),
            fetcher=fake_fetcher,
            validator=validator,
        )
        with pytest.raises(DiagramValidationError) as exc_info:
            await synth.generate(sample_ref)

        assert mock_llm_provider.respond.await_count == 3
        assert validator.validate.await_count == 3
        assert exc_info.value.last_error == "err 3"
        assert str(exc_info.value) == (
            "Failed to generate valid Mermaid diagram after 3 attempts. Last error: err 3"
        )

    async def test_single_attempt(self, mock_llm_provider, fake_fetcher, sample_ref):
        synth = DiagramSynthesizer(
            mock_llm_provider,
            SynthesisConfig(max_attempts=1),
            fetcher=fake_fetcher,
            validator=_validator("nope"),
        )
        with pytest.raises(DiagramValidationError, match="after 1 attempts"):
            await synth.generate(sample_ref)
        assert mock_llm_provider.respond.await_count == 1

    async def test_missing_block_is_fatal(self, fake_fetcher, accepting_validator, sample_ref):
        provider = MagicMock(spec=LLMProvider)
        provider.config = LLMConfig(provider="openai", model="gpt-5")
        provider.respond = AsyncMock(return_value=_flat("Which services should I include?"))
        synth = DiagramSynthesizer(provider, fetcher=fake_fetcher, validator=accepting_validator)

        with pytest.raises(DiagramNotFoundError):
            await synth.generate(sample_ref)
        assert provider.respond.await_count == 1
        accepting_validator.validate.assert_not_awaited()

    async def test_missing_block_during_correction_is_fatal(self, fake_fetcher, sample_ref):
        provider = MagicMock(spec=LLMProvider)
        provider.config = LLMConfig(provider="openai", model="gpt-5")
        provider.respond = AsyncMock(side_effect=[
            _flat("```mermaid\ngraph TD\nA[(]\n```"),
            _flat("Sorry, I cannot fix that."),
        ])
        synth = DiagramSynthesizer(
            provider, fetcher=fake_fetcher, validator=_validator("Parse error")
        )
        with pytest.raises(DiagramNotFoundError):
            await synth.generate(sample_ref)
        assert provider.respond.await_count == 2

    async def test_empty_response_raises_shape_error(self, fake_fetcher, accepting_validator, sample_ref):
        provider = MagicMock(spec=LLMProvider)
        provider.config = LLMConfig(provider="openai", model="gpt-5")
        provider.respond = AsyncMock(
            return_value=StructuredResponse(id="r", status="completed", output=[])
        )
        synth = DiagramSynthesizer(provider, fetcher=fake_fetcher, validator=accepting_validator)
        with pytest.raises(ResponseShapeError):
            await synth.generate(sample_ref)


# ---------------------------------------------------------------------------
# Diff enhancement
# ---------------------------------------------------------------------------


class TestEnhanceWithDiff:
    async def test_appends_diff_turn(self, mock_llm_provider, accepting_validator):
        prior = (
            Conversation()
            .append("user", "prompt")
            .append("user", "approved")
            .append("assistant", "```mermaid\ngraph TD\n```")
        )
        synth = DiagramSynthesizer(mock_llm_provider, validator=accepting_validator)
        result = await synth.enhance_with_diff(prior, "diff --git a/x b/x\n+added")

        sent = mock_llm_provider.respond.call_args.args[0]
        assert len(sent) == 4
        assert "+added" in sent.messages[-1].content
        assert result.conversation.messages[:3] == prior.messages
        assert result.attempts == 1

    async def test_empty_diff_rejected(self, mock_llm_provider, accepting_validator):
        synth = DiagramSynthesizer(mock_llm_provider, validator=accepting_validator)
        with pytest.raises(ValueError, match="empty diff"):
            await synth.enhance_with_diff(Conversation(), "  \n")
        mock_llm_provider.respond.assert_not_awaited()


# ---------------------------------------------------------------------------
# generate_diagram
# ---------------------------------------------------------------------------


class TestGenerateDiagram:
    async def test_uses_injected_provider(
        self, mock_llm_provider, fake_fetcher, accepting_validator, sample_ref
    ):
        result = await generate_diagram(
            sample_ref,
            llm=mock_llm_provider,
            fetcher=fake_fetcher,
            validator=accepting_validator,
        )
        assert result.attempts == 1

    @patch.dict(os.environ, {}, clear=True)
    async def test_missing_credentials_without_injection(self, sample_ref):
        with pytest.raises(ValueError, match="Missing API key"):
            await generate_diagram(sample_ref, RepoDiagramConfig())
