"""Interpretation generator: the six-section reading for a drawn spread."""

import structlog

from llm import CREATIVE, LLMError, LLMProvider

from .deck import DrawnCard
from .errors import GenerationFailure
from .generation import complete
from .models import ConversationTurn
from .prompts import PromptTemplates, format_cards, format_history

logger = structlog.get_logger()


def build_interpretation_prompt(
    question: str,
    cards: list[DrawnCard],
    personal_context: str | None = None,
    memory_context: str | None = None,
    history: list[ConversationTurn] | None = None,
    context_summary: str | None = None,
) -> str:
    """Assemble the user prompt; empty blocks are left out."""
    blocks = []
    if personal_context:
        blocks.append(personal_context.strip())
    if context_summary:
        blocks.append(f"**Contexto emocional detectado:** {context_summary}")
    if memory_context:
        blocks.append(
            f"**Contexto conocido del consultante (de sesiones anteriores):**\n{memory_context}"
        )
    if history:
        blocks.append(
            f"---\n**Historial de la conversación anterior:**\n{format_history(history)}\n---"
        )
    blocks.append(f'**Pregunta actual del consultante:** "{question}"')
    blocks.append(f"**Cartas para esta pregunta:**\n{format_cards(cards)}")
    blocks.append("Por favor, genera una interpretación de tarot.")
    return "\n\n".join(blocks)


class Interpreter:
    """Writes the reading. Structure is requested, never retried; the codec degrades instead."""

    def __init__(self, provider: LLMProvider, max_tokens: int = 2000, retry=None):
        self.provider = provider
        self.max_tokens = max_tokens
        self._retry = retry

    async def interpret(
        self,
        question: str,
        cards: list[DrawnCard],
        personal_context: str | None = None,
        memory_context: str | None = None,
        history: list[ConversationTurn] | None = None,
        context_summary: str | None = None,
    ) -> str:
        prompt = build_interpretation_prompt(
            question,
            cards,
            personal_context=personal_context,
            memory_context=memory_context,
            history=history,
            context_summary=context_summary,
        )
        try:
            text = await complete(
                self.provider,
                PromptTemplates.INTERPRETER,
                prompt,
                temperature=CREATIVE,
                max_tokens=self.max_tokens,
                retry=self._retry,
            )
        except LLMError as e:
            raise GenerationFailure(f"interpretation failed: {e}") from e

        if not text or not text.strip():
            raise GenerationFailure("interpretation came back empty")
        logger.debug("interpreter.generated", chars=len(text), cards=len(cards))
        return text
