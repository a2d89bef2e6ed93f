"""Shared test fixtures for the tarot oracle."""

import json
import random
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from llm import LLMProvider  # noqa: E402
from oracle.prompts import PromptTemplates  # noqa: E402

SAMPLE_READING = """## Saludo
Bienvenida, alma curiosa. Las cartas ya hablan.

## Pasado
El Loco marca un comienzo impulsivo. Saltaste sin mirar.

## Presente
La Emperatriz invertida pide cuidado propio. Hoy necesitas nutrirte.

## Futuro
La Estrella anuncia calma después de la tormenta. Habrá sanación lenta y profunda.

## Síntesis
Del impulso al cuidado y de ahí a la esperanza.

## Consejo
Descansa antes de decidir. Confía en tu ritmo.
"""


def route_by_system(**replies):
    """Side effect for ``provider.generate`` that answers per system prompt.

    Keys are PromptTemplates attribute names (DECIDER, INTERPRETER, ...) or
    ``default``. Values are strings, dicts (sent as JSON) or exceptions.
    """
    by_prompt = {getattr(PromptTemplates, name): value for name, value in replies.items() if name != "default"}
    default = replies.get("default", "")

    def _generate(messages, system=None, **kwargs):
        reply = by_prompt.get(system, default)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply, ensure_ascii=False)
        return reply

    return _generate


@pytest.fixture
def provider():
    """LLM provider mock; set ``provider.generate.side_effect`` per test."""
    mock = MagicMock(spec=LLMProvider)
    mock.provider_name = "mock"
    mock.generate.return_value = ""
    return mock


@pytest.fixture
def scripted():
    """The ``route_by_system`` helper, for building generate side effects."""
    return route_by_system


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sample_reading():
    return SAMPLE_READING


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "oracle.db"
