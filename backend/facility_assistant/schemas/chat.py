"""Pydantic schemas for chat operations."""

from datetime import datetime

from pydantic import BaseModel, Field

from facility_assistant.db.models import Sender
from facility_assistant.schemas.base import BaseSchema


class ChatMessageRequest(BaseSchema):
    """Request to send a chat message. Surrounding whitespace is stripped."""

    message: str = Field(..., min_length=1, max_length=10000)


class ReactionRequest(BaseModel):
    """Add one emoji reaction to a message."""

    emoji: str = Field(..., min_length=1, max_length=16)


class ChatMessageResponse(BaseSchema):
    """Chat message response."""

    id: str
    sender: Sender
    text: str
    reactions: dict[str, int] = Field(default_factory=dict)
    timestamp: datetime


class UtteranceResponse(BaseSchema):
    """Text the browser should speak, with the selected voice and rate."""

    id: str
    text: str
    rate: float
    voice_id: str | None = None


class ChatTurnResponse(BaseModel):
    """Result of one conversational turn."""

    user_message: ChatMessageResponse
    reply: ChatMessageResponse
    utterance: UtteranceResponse | None = None
    failed: bool = False


class ConversationResponse(BaseModel):
    """Full message log for the client session."""

    messages: list[ChatMessageResponse]
    busy: bool = False


class HistoryItem(BaseModel):
    sender: Sender
    text: str


class AssistantRequest(BaseModel):
    """Gateway request: latest prompt plus prior sender/text pairs."""

    prompt: str = Field(..., min_length=1, max_length=10000)
    history: list[HistoryItem] = Field(default_factory=list)


class AssistantResponse(BaseModel):
    text: str


class AssistantErrorResponse(BaseModel):
    error: str
