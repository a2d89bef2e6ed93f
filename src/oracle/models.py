"""Domain types for the reading pipeline and schemas for generated JSON."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .deck import DrawnCard


class Intent(str, Enum):
    REQUIRES_NEW_DRAW = "requires_new_draw"
    IS_FOLLOW_UP = "is_follow_up"
    IS_INADEQUATE = "is_inadequate"


class MissingDimension(str, Enum):
    TIMEFRAME = "timeframe"
    FOCUS = "focus"
    AGENCY = "agency"
    INTENT = "intent"


@dataclass
class ConversationTurn:
    role: str  # user | assistant
    content: str
    cards: list[DrawnCard] | None = None
    is_context_question: bool = False

    def to_cache_message(self) -> dict:
        return {
            "role": self.role,
            "content": self.content,
            "cards": [c.to_dict() for c in self.cards] if self.cards else None,
        }


@dataclass(frozen=True)
class Decision:
    """Outcome of intent classification. ``canned`` is set only for inadequate questions."""

    intent: Intent
    canned: str | None = None

    @classmethod
    def new_draw(cls) -> "Decision":
        return cls(Intent.REQUIRES_NEW_DRAW)


@dataclass(frozen=True)
class ContextEvaluation:
    proceed: bool
    summary: str | None = None
    oracle_question: str | None = None
    missing_dimension: MissingDimension | None = None


@dataclass
class ReadingPermissions:
    can_see_future: bool = False
    is_premium: bool = False

    @property
    def future_visible(self) -> bool:
        return self.can_see_future or self.is_premium


# --- Schemas for generated JSON ---


class _NewDrawOut(BaseModel):
    type: Literal["requires_new_draw"]


class _FollowUpOut(BaseModel):
    type: Literal["is_follow_up"]


class _InadequateOut(BaseModel):
    type: Literal["is_inadequate"]
    response: str = Field(min_length=1)


DeciderOutput = TypeAdapter(
    Union[_NewDrawOut, _FollowUpOut, _InadequateOut],
)


class _ProceedOut(BaseModel):
    proceed: Literal[True]
    context_summary: str | None = None


class _AskContextOut(BaseModel):
    proceed: Literal[False]
    oracle_question: str = Field(min_length=1)
    missing_dimension: MissingDimension


ContextEvaluatorOutput = TypeAdapter(Union[_ProceedOut, _AskContextOut])


@dataclass
class ChatRequest:
    """One consultant message, as either phase receives it."""

    question: str
    history: list[ConversationTurn] = field(default_factory=list)
    personal_context: str | None = None
    user_id: str | None = None
    conversation_id: str | None = None
    # Phase 2 only
    memory_context: str | None = None
    context_summary: str | None = None
    drawn_cards: list[DrawnCard] | None = None

    @property
    def is_anonymous(self) -> bool:
        return not self.user_id or self.user_id == "anonymous"

    @property
    def answers_context_question(self) -> bool:
        return bool(self.history) and (
            self.history[-1].role == "assistant" and self.history[-1].is_context_question
        )
