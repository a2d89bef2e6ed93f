"""Base LLM provider abstraction."""

from abc import ABC, abstractmethod


class LLMError(Exception):
    """Base LLM error."""


class LLMRateLimitError(LLMError):
    """Rate limit hit."""


class LLMAuthError(LLMError):
    """Authentication failure."""


# Temperatures used by the oracle agents
DETERMINISTIC = 0.0
LOW_CREATIVITY = 0.3
CREATIVE = 0.7

JSON_ONLY_SUFFIX = "\n\nResponde únicamente con un objeto JSON válido, sin texto adicional."


class LLMProvider(ABC):
    """Abstract LLM provider interface."""

    provider_name: str = "base"

    @abstractmethod
    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> str:
        """Generate a response from messages.

        Args:
            messages: List of {"role": ..., "content": ...} dicts
            system: Optional system prompt
            max_tokens: Max response tokens
            temperature: Sampling temperature (None = provider default)
            json_mode: Constrain the output to a single JSON object

        Returns:
            Generated text
        """
        ...
