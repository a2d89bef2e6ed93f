"""LLM-based title generation for new conversations."""

import structlog

from llm import CREATIVE, LLMProvider

from .generation import complete
from .prompts import PromptTemplates

logger = structlog.get_logger()


def clean_title(result: str) -> str | None:
    title = (result or "").replace('"', "").strip().strip("'").strip("«»").strip()
    if title and len(title) < 100:
        return title
    return None


class TitleGenerator:
    """Short chat title from the first question.

    An empty reply falls back to the start of the question; a failed call
    means no title at all, never an error.
    """

    def __init__(self, provider: LLMProvider, max_tokens: int = 20, fallback_chars: int = 40):
        self.provider = provider
        self.max_tokens = max_tokens
        self.fallback_chars = fallback_chars

    async def generate(self, question: str) -> str | None:
        try:
            result = await complete(
                self.provider,
                PromptTemplates.TITLE,
                question,
                temperature=CREATIVE,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.warning("title_generation_failed", error=str(e))
            return None
        return clean_title(result) or question[: self.fallback_chars]
