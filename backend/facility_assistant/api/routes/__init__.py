"""API routes package."""

from facility_assistant.api.routes import (
    assistant,
    auth,
    chat,
    problems,
    voice,
)

__all__ = [
    "assistant",
    "auth",
    "chat",
    "problems",
    "voice",
]
