"""Multi-provider LLM abstraction layer."""

from .base import (
    CREATIVE,
    DETERMINISTIC,
    LOW_CREATIVITY,
    LLMAuthError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
)
from .factory import create_cheap_provider, create_llm_provider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "create_cheap_provider",
    "LLMError",
    "LLMRateLimitError",
    "LLMAuthError",
    "DETERMINISTIC",
    "LOW_CREATIVITY",
    "CREATIVE",
]
