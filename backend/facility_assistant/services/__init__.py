"""Session-layer services and external integrations."""

from facility_assistant.services.chat_service import chat_service
from facility_assistant.services.session_manager import get_session_registry

__all__ = ["chat_service", "get_session_registry"]
