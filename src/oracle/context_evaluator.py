"""Context sufficiency gate before a draw."""

import re

import structlog

from llm import LOW_CREATIVITY, LLMError, LLMProvider

from .errors import GenerationFailure
from .generation import complete, parse_json_object
from .models import ContextEvaluation, ContextEvaluatorOutput, ConversationTurn, MissingDimension
from .prompts import PromptTemplates, format_history
from .sections import fold_accents

logger = structlog.get_logger()

# Short go-ahead replies ("sí, procede", "dale", "ok") always mean: draw now
_AFFIRMATIVE_CUE = re.compile(
    r"^(dale|procede|hazlo|adelante|ok|okay|va|vale|claro|listo|tira las cartas"
    r"|go ahead|proceed|yes|sure|do it)\b"
)
# Unaccented "si" is also the conditional "if": only a bare "si" or "si," counts
_YES_CUE = re.compile(r"^(sí\b|si\s*([,.!]|$))", re.IGNORECASE)
_MAX_CUE_WORDS = 5


def is_affirmative_cue(message: str) -> bool:
    folded = re.sub(r"[^\w\s]", " ", fold_accents(message)).strip()
    if not folded or len(folded.split()) > _MAX_CUE_WORDS:
        return False
    return bool(_YES_CUE.match(message.strip()) or _AFFIRMATIVE_CUE.match(folded))


class ContextEvaluator:
    """Judges timeframe, focus, agency and intent; asks at most one question."""

    def __init__(self, provider: LLMProvider, max_tokens: int = 300, retry=None):
        self.provider = provider
        self.max_tokens = max_tokens
        self._retry = retry

    async def evaluate(
        self,
        question: str,
        history: list[ConversationTurn],
        personal_context: str | None = None,
    ) -> ContextEvaluation:
        if is_affirmative_cue(question):
            logger.info("context.affirmative_cue")
            return ContextEvaluation(proceed=True)

        prompt = (
            f"{personal_context or ''}\n\n"
            f"Historial de conversación:\n{format_history(history, speaker_labels=False)}\n\n"
            f'Pregunta del consultante: "{question}"'
        )
        try:
            reply = await complete(
                self.provider,
                PromptTemplates.CONTEXT_EVALUATOR,
                prompt,
                temperature=LOW_CREATIVITY,
                json_mode=True,
                max_tokens=self.max_tokens,
                retry=self._retry,
            )
        except LLMError as e:
            raise GenerationFailure(f"context evaluation failed: {e}") from e

        try:
            parsed = ContextEvaluatorOutput.validate_python(parse_json_object(reply))
        except ValueError as e:
            logger.warning("context.unparsable", reply=(reply or "")[:200])
            raise GenerationFailure(f"context evaluation reply did not match schema: {e}") from e

        if parsed.proceed:
            return ContextEvaluation(proceed=True, summary=parsed.context_summary or None)
        return ContextEvaluation(
            proceed=False,
            oracle_question=parsed.oracle_question.strip(),
            missing_dimension=MissingDimension(parsed.missing_dimension),
        )
