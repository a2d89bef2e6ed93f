"""Tarot oracle: intent classification, context gating, sectioned readings."""

from .deck import TAROT_DECK, Card, CardPool, DrawnCard
from .errors import ClassificationFailure, GenerationFailure, OracleError
from .models import ChatRequest, ConversationTurn, Intent, MissingDimension
from .orchestrator import ChatOrchestrator
from .pacing import FixedDelay, NoDelay, SectionPacer
from .session_cache import AnonymousSessionCache

__all__ = [
    "TAROT_DECK",
    "AnonymousSessionCache",
    "Card",
    "CardPool",
    "ChatOrchestrator",
    "ChatRequest",
    "ClassificationFailure",
    "ConversationTurn",
    "DrawnCard",
    "FixedDelay",
    "GenerationFailure",
    "Intent",
    "MissingDimension",
    "NoDelay",
    "OracleError",
    "SectionPacer",
]
