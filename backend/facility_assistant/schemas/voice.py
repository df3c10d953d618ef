"""Voice settings and speech I/O schemas."""

from pydantic import BaseModel, Field

from facility_assistant.schemas.base import BaseSchema
from facility_assistant.schemas.chat import ChatTurnResponse
from facility_assistant.services.voice_bridge import VoiceStatus


class VoiceSettingsRead(BaseSchema):
    voice_id: str | None = None
    rate: float
    listening: bool
    speech_to_text: bool
    text_to_speech: bool


class VoiceSettingsUpdate(BaseSchema):
    voice_id: str | None = None
    rate: float | None = Field(None, ge=0.5, le=2.0)


class ListenToggleResponse(BaseModel):
    status: VoiceStatus
    listening: bool


class TranscriptRequest(BaseModel):
    transcript: str = Field(..., max_length=10000)


class TranscriptResponse(BaseModel):
    """A transcript either produced a chat turn or was empty and ignored."""

    turn: ChatTurnResponse | None = None
