"""Pydantic schemas for API request/response validation."""

from facility_assistant.schemas.base import BaseSchema
from facility_assistant.schemas.auth import (
    AccountRead,
    AuthResponse,
    FindAccountRequest,
    LoginRequest,
    PasswordResetRequest,
    RegisterRequest,
    RoleSelectRequest,
    SessionStateRead,
)
from facility_assistant.schemas.chat import (
    AssistantErrorResponse,
    AssistantRequest,
    AssistantResponse,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatTurnResponse,
    ConversationResponse,
    ReactionRequest,
    UtteranceResponse,
)
from facility_assistant.schemas.problems import (
    ClearResolvedResponse,
    ProblemListResponse,
    ProblemRead,
    ProblemStatusUpdate,
)
from facility_assistant.schemas.voice import (
    ListenToggleResponse,
    TranscriptRequest,
    TranscriptResponse,
    VoiceSettingsRead,
    VoiceSettingsUpdate,
)

__all__ = [
    "BaseSchema",
    # Auth
    "AccountRead",
    "AuthResponse",
    "FindAccountRequest",
    "LoginRequest",
    "PasswordResetRequest",
    "RegisterRequest",
    "RoleSelectRequest",
    "SessionStateRead",
    # Chat
    "AssistantErrorResponse",
    "AssistantRequest",
    "AssistantResponse",
    "ChatMessageRequest",
    "ChatMessageResponse",
    "ChatTurnResponse",
    "ConversationResponse",
    "ReactionRequest",
    "UtteranceResponse",
    # Problems
    "ClearResolvedResponse",
    "ProblemListResponse",
    "ProblemRead",
    "ProblemStatusUpdate",
    # Voice
    "ListenToggleResponse",
    "TranscriptRequest",
    "TranscriptResponse",
    "VoiceSettingsRead",
    "VoiceSettingsUpdate",
]
