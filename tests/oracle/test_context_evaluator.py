"""Tests for the context sufficiency gate."""

import pytest

from llm import LLMError
from oracle.context_evaluator import ContextEvaluator, is_affirmative_cue
from oracle.errors import GenerationFailure
from oracle.models import MissingDimension


class TestAffirmativeCue:
    @pytest.mark.parametrize(
        "message",
        ["sí, procede", "Sí", "si", "si, dale", "Dale", "ok", "adelante!", "go ahead", "Tira las cartas"],
    )
    def test_detected(self, message):
        assert is_affirmative_cue(message)

    @pytest.mark.parametrize(
        "message",
        [
            "¿Cómo estará mi semana?",
            "Siento que mi relación con mi pareja se está enfriando mucho",
            "Si me caso, ¿seré feliz?",
            "si cambio de trabajo",
            "",
        ],
    )
    def test_not_detected(self, message):
        assert not is_affirmative_cue(message)


class TestContextEvaluator:
    @pytest.mark.asyncio
    async def test_affirmative_skips_backend(self, provider):
        evaluation = await ContextEvaluator(provider).evaluate("sí, procede", [])
        assert evaluation.proceed is True
        provider.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_proceed_with_summary(self, provider, scripted):
        provider.generate.side_effect = scripted(
            CONTEXT_EVALUATOR={"proceed": True, "context_summary": "Busca claridad para la semana"}
        )
        evaluation = await ContextEvaluator(provider).evaluate("¿Cómo estará mi semana?", [])
        assert evaluation.proceed is True
        assert evaluation.summary == "Busca claridad para la semana"
        assert provider.generate.call_args.kwargs["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_asks_one_question(self, provider, scripted):
        provider.generate.side_effect = scripted(
            CONTEXT_EVALUATOR={
                "proceed": False,
                "oracle_question": "¿Esto viene de hace tiempo o es reciente?",
                "missing_dimension": "timeframe",
            }
        )
        evaluation = await ContextEvaluator(provider).evaluate("Estoy triste", [], "Nombre: Ana")
        assert evaluation.proceed is False
        assert evaluation.oracle_question == "¿Esto viene de hace tiempo o es reciente?"
        assert evaluation.missing_dimension is MissingDimension.TIMEFRAME
        assert "Nombre: Ana" in provider.generate.call_args.kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            {"proceed": False, "missing_dimension": "focus"},
            {"proceed": False, "oracle_question": "¿Qué?", "missing_dimension": "mood"},
            {"continue": True},
        ],
    )
    async def test_schema_violation_is_failure(self, provider, scripted, reply):
        provider.generate.side_effect = scripted(CONTEXT_EVALUATOR=reply)
        with pytest.raises(GenerationFailure):
            await ContextEvaluator(provider).evaluate("Estoy triste", [])

    @pytest.mark.asyncio
    async def test_backend_error_is_failure(self, provider):
        provider.generate.side_effect = LLMError("down")
        with pytest.raises(GenerationFailure):
            await ContextEvaluator(provider).evaluate("Estoy triste", [])
