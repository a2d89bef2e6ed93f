"""Intent classification: new draw, follow-up, or not a tarot question."""

import re

import structlog

from llm import DETERMINISTIC, LLMError, LLMProvider

from .errors import ClassificationFailure
from .generation import complete, parse_json_object
from .models import ConversationTurn, Decision, DeciderOutput, Intent
from .prompts import PromptTemplates, format_history
from .sections import fold_accents

logger = structlog.get_logger()

# Asking for the reading itself always means a fresh draw
_READING_CUES = re.compile(
    r"\b(cartas|tirada|tiradas|lectura|lecturas|reading|readings|the cards|new draw|draw cards)\b"
)


def has_reading_cue(question: str) -> bool:
    return bool(_READING_CUES.search(fold_accents(question)))


def has_prior_reading(history: list[ConversationTurn]) -> bool:
    return any(turn.role == "assistant" for turn in history)


class IntentClassifier:
    """Decider agent. Runs in deterministic mode and validates the reply strictly."""

    def __init__(self, provider: LLMProvider, max_tokens: int = 300, retry=None):
        self.provider = provider
        self.max_tokens = max_tokens
        self._retry = retry

    async def classify(self, question: str, history: list[ConversationTurn]) -> Decision:
        if has_reading_cue(question):
            logger.info("decider.reading_cue", intent=Intent.REQUIRES_NEW_DRAW.value)
            return Decision.new_draw()

        prompt = (
            f"Historial de la conversación:\n{format_history(history, speaker_labels=False)}\n\n"
            f'Pregunta actual del usuario: "{question}"'
        )
        try:
            reply = await complete(
                self.provider,
                PromptTemplates.DECIDER,
                prompt,
                temperature=DETERMINISTIC,
                json_mode=True,
                max_tokens=self.max_tokens,
                retry=self._retry,
            )
        except LLMError as e:
            raise ClassificationFailure(f"decider call failed: {e}") from e

        try:
            parsed = DeciderOutput.validate_python(parse_json_object(reply))
        except ValueError as e:
            logger.warning("decider.unparsable", reply=(reply or "")[:200])
            raise ClassificationFailure(f"decider reply did not match schema: {e}") from e

        intent = Intent(parsed.type)
        if intent is Intent.IS_FOLLOW_UP and not has_prior_reading(history):
            logger.info("decider.follow_up_without_reading")
            return Decision.new_draw()
        if intent is Intent.IS_INADEQUATE:
            return Decision(intent, canned=parsed.response)
        return Decision(intent)
