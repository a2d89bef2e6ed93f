"""Conversational replies about a reading that was already given."""

from llm import CREATIVE, LLMError, LLMProvider

from .errors import GenerationFailure
from .generation import complete
from .models import ConversationTurn
from .prompts import PromptTemplates, format_history


class FollowUpResponder:
    def __init__(self, provider: LLMProvider, max_tokens: int = 1000, retry=None):
        self.provider = provider
        self.max_tokens = max_tokens
        self._retry = retry

    async def respond(
        self,
        question: str,
        history: list[ConversationTurn],
        personal_context: str | None = None,
    ) -> str:
        prompt = (
            f"{personal_context or ''}\n\n"
            f"**Historial de la conversación:**\n{format_history(history)}\n\n"
            f'**Mensaje del consultante:** "{question}"'
        )
        try:
            text = await complete(
                self.provider,
                PromptTemplates.FOLLOWUP,
                prompt,
                temperature=CREATIVE,
                max_tokens=self.max_tokens,
                retry=self._retry,
            )
        except LLMError as e:
            raise GenerationFailure(f"follow-up failed: {e}") from e
        if not text or not text.strip():
            raise GenerationFailure("follow-up came back empty")
        return text.strip()
