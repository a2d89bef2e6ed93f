"""Pydantic request/response schemas for the web API.

Wire names are camelCase; ``chatId`` is accepted wherever ``conversationId`` is.
"""

from typing import Annotated, Any, Optional

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field

from oracle.deck import DrawnCard
from oracle.models import ChatRequest, ConversationTurn

_CONVERSATION_ID = AliasChoices("conversationId", "chatId", "conversation_id")


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _check_cards(cards: Optional[list[dict]]) -> Optional[list[dict]]:
    for card in cards or []:
        if not str(card.get("name") or "").strip():
            raise ValueError("every card needs a name")
    return cards


CardList = Annotated[Optional[list[dict[str, Any]]], AfterValidator(_check_cards)]


# --- Chat ---


class HistoryMessage(_Wire):
    role: str = Field(..., pattern="^(user|assistant)$")
    content: str = ""
    cards: CardList = None
    is_context_question: bool = Field(
        False,
        validation_alias=AliasChoices("_isContextQuestion", "isContextQuestion", "is_context_question"),
    )

    def to_turn(self) -> ConversationTurn:
        cards = [DrawnCard.from_dict(c, i) for i, c in enumerate(self.cards)] if self.cards else None
        return ConversationTurn(
            role=self.role,
            content=self.content,
            cards=cards,
            is_context_question=self.is_context_question,
        )


class ChatMessageRequest(_Wire):
    question: str = Field(..., min_length=1)
    history: list[HistoryMessage] = []
    personal_context: Optional[str] = Field(None, alias="personalContext")
    user_id: Optional[str] = Field(None, alias="userId")
    conversation_id: Optional[str] = Field(None, validation_alias=_CONVERSATION_ID)

    def to_request(self) -> ChatRequest:
        return ChatRequest(
            question=self.question,
            history=[m.to_turn() for m in self.history],
            personal_context=self.personal_context,
            user_id=self.user_id,
            conversation_id=self.conversation_id,
        )


class InterpretRequest(ChatMessageRequest):
    conversation_id: str = Field(..., min_length=1, validation_alias=_CONVERSATION_ID)
    memory_context: Optional[str] = Field(None, alias="memoryContext")
    context_summary: Optional[str] = Field(None, alias="contextSummary")
    drawn_cards: CardList = Field(None, alias="drawnCards")

    def to_request(self) -> ChatRequest:
        request = super().to_request()
        request.memory_context = self.memory_context
        request.context_summary = self.context_summary
        if self.drawn_cards:
            request.drawn_cards = [DrawnCard.from_dict(c, i) for i, c in enumerate(self.drawn_cards)]
        return request


class TransferRequest(_Wire):
    conversation_id: str = Field(..., min_length=1, validation_alias=_CONVERSATION_ID)
    new_user_id: str = Field(..., min_length=1, alias="newUserId")
    messages: Optional[list[dict[str, Any]]] = None


class TransferResponse(BaseModel):
    success: bool = True
    chatId: str
    source: str
