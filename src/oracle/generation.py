"""Async bridge to the sync LLM providers, plus JSON reply parsing."""

import asyncio
import json
from typing import Callable

from llm import LLMProvider


async def complete(
    provider: LLMProvider,
    system: str,
    prompt: str,
    *,
    temperature: float | None = None,
    json_mode: bool = False,
    max_tokens: int = 2000,
    retry: Callable | None = None,
) -> str:
    """Run one generation off the event loop.

    ``retry`` is an optional tenacity decorator (see ``cli.retry.llm_retry``).
    """
    call = provider.generate
    if retry is not None:
        call = retry(call)
    return await asyncio.to_thread(
        call,
        messages=[{"role": "user", "content": prompt}],
        system=system,
        max_tokens=max_tokens,
        temperature=temperature,
        json_mode=json_mode,
    )


def parse_json_object(response: str) -> dict:
    """Parse a single JSON object, tolerating markdown fences.

    Raises ValueError when the reply is not a JSON object.
    """
    text = (response or "").strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[-1]
    if text.endswith("```"):
        text = text.rsplit("```", 1)[0]
    text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"reply is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data
