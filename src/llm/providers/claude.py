"""Claude (Anthropic) LLM provider."""

from ..base import (
    JSON_ONLY_SUFFIX,
    LLMAuthError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
)


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider."""

    provider_name = "claude"

    def __init__(self, api_key: str | None = None, model: str | None = None, client=None):
        self.model = model or "claude-sonnet-4-5"

        if client:
            self.client = client
            return

        try:
            from anthropic import Anthropic
        except ImportError:
            raise LLMError("anthropic package not installed. Run: pip install anthropic")

        self.client = Anthropic(api_key=api_key)

    def _get_exceptions(self):
        from anthropic import APIError, AuthenticationError, RateLimitError

        return AuthenticationError, RateLimitError, APIError

    def _handle_error(self, e: Exception):
        try:
            AuthenticationError, RateLimitError, APIError = self._get_exceptions()
        except ImportError:
            raise LLMError(f"Claude error: {e}") from e
        if isinstance(e, AuthenticationError):
            raise LLMAuthError(f"Claude auth failed: {e}") from e
        if isinstance(e, RateLimitError):
            raise LLMRateLimitError(f"Claude rate limit: {e}") from e
        if isinstance(e, APIError):
            raise LLMError(f"Claude API error: {e}") from e
        raise LLMError(f"Claude error: {e}") from e

    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> str:
        # No native JSON mode: ask for it in the system prompt
        if json_mode:
            system = (system or "") + JSON_ONLY_SUFFIX

        try:
            kwargs = {
                "model": self.model,
                "max_tokens": max_tokens,
                "messages": messages,
            }
            if system:
                kwargs["system"] = system
            if temperature is not None:
                kwargs["temperature"] = temperature

            response = self.client.messages.create(**kwargs)
            return "".join(
                block.text for block in response.content if getattr(block, "type", "text") == "text"
            )
        except Exception as e:
            self._handle_error(e)
