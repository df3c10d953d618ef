"""
Per-client session state and the registry that owns it.

A ClientSession bundles everything one browser works with: the
authenticator, the conversation log, the ticket board and the voice bridge.
The credential store and the gateway are shared and passed in explicitly.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from uuid import uuid4

from facility_assistant.config import get_settings
from facility_assistant.db.models import ChatMessage
from facility_assistant.services.authenticator import SessionAuthenticator
from facility_assistant.services.chat_service import (
    FALLBACK_REPLY,
    AssistantGateway,
    GatewayError,
    chat_service,
)
from facility_assistant.services.conversation import ConversationLog
from facility_assistant.services.credential_store import CredentialStore, get_credential_store
from facility_assistant.services.tickets import ProblemTicketBoard
from facility_assistant.services.voice_bridge import (
    SPEECH_ENGINES,
    SpeechEngine,
    Utterance,
    VoiceBridge,
    VoiceStatus,
)

logger = logging.getLogger(__name__)


class GatewayBusyError(RuntimeError):
    """A send was attempted while the previous reply is still pending."""


@dataclass
class TurnResult:
    user_message: ChatMessage
    reply: ChatMessage
    utterance: Utterance | None
    failed: bool = False


class ClientSession:
    """One browser's view of the assistant."""

    def __init__(
        self,
        session_id: str,
        *,
        credentials: CredentialStore,
        gateway: AssistantGateway,
        voice: VoiceBridge,
        admin_code: str,
    ):
        self.id = session_id
        self.auth = SessionAuthenticator(credentials, admin_code=admin_code)
        self.conversation = ConversationLog()
        self.tickets = ProblemTicketBoard()
        self.gateway = gateway
        self.voice = voice
        self.busy = False
        self.last_seen = time.monotonic()

    async def send_message(self, text: str) -> TurnResult:
        """
        Append a user message, ask the gateway for a reply and append it.

        Text is trimmed first; blank text raises ValueError.
        Only one turn may be in flight; a second send is rejected, not queued.
        Gateway failures become the fixed fallback reply. Either way the reply
        is handed to the voice bridge.
        """
        text = text.strip()
        if not text:
            raise ValueError("Message text must not be blank.")
        if self.busy:
            raise GatewayBusyError("A reply is already pending.")
        self.busy = True
        try:
            self.voice.stop_listening()
            history = self.conversation.history()
            user_message = self.conversation.append_user_message(text)
            failed = False
            try:
                reply_text = await self.gateway.generate_reply(text, history)
            except GatewayError:
                logger.exception("Assistant gateway failed for session %s", self.id)
                reply_text = FALLBACK_REPLY
                failed = True
            reply = self.conversation.append_bot_message(reply_text)
            utterance = self.voice.speak(reply_text)
        finally:
            self.busy = False
        return TurnResult(user_message=user_message, reply=reply, utterance=utterance, failed=failed)

    async def submit_transcript(self, transcript: str) -> TurnResult | None:
        """Feed a speech-to-text result through the same path as typed input."""
        self.voice.stop_listening()
        if not transcript.strip():
            return None
        return await self.send_message(transcript)

    def toggle_listening(self) -> VoiceStatus:
        return self.voice.toggle_listening(busy=self.busy)

    def clear_chat(self) -> None:
        self.conversation.reset()

    def logout(self) -> None:
        self.auth.logout()
        self.conversation.reset()
        self.tickets.clear()
        self.voice.stop_listening()
        self.voice.cancel_speech()

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def close(self) -> None:
        self.voice.close()


class SessionRegistry:
    """
    Creates, looks up and tears down client sessions.

    Sessions idle for longer than ``ttl_seconds`` (by default the session
    token lifetime) are dropped on lookup and pruned whenever a new session
    is created.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore | None = None,
        gateway: AssistantGateway | None = None,
        engine_factory: Callable[[], SpeechEngine] | None = None,
        ttl_seconds: float | None = None,
    ):
        self._credentials = credentials
        self._gateway = gateway
        self._engine_factory = engine_factory
        self._ttl_seconds = ttl_seconds
        self._sessions: dict[str, ClientSession] = {}

    @property
    def credentials(self) -> CredentialStore:
        if self._credentials is None:
            self._credentials = get_credential_store()
        return self._credentials

    @property
    def gateway(self) -> AssistantGateway:
        return self._gateway if self._gateway is not None else chat_service

    @property
    def engine_factory(self) -> Callable[[], SpeechEngine]:
        if self._engine_factory is not None:
            return self._engine_factory
        return SPEECH_ENGINES[get_settings().speech_engine]

    @property
    def ttl_seconds(self) -> float:
        if self._ttl_seconds is not None:
            return self._ttl_seconds
        return get_settings().jwt_expire_minutes * 60

    def _expired(self, session: ClientSession, now: float) -> bool:
        return now - session.last_seen > self.ttl_seconds

    def create(self) -> ClientSession:
        self.prune()
        settings = get_settings()
        session = ClientSession(
            str(uuid4()),
            credentials=self.credentials,
            gateway=self.gateway,
            voice=VoiceBridge(
                self.engine_factory(),
                voice_id=settings.default_voice_id,
                rate=settings.default_speech_rate,
            ),
            admin_code=settings.admin_code,
        )
        self._sessions[session.id] = session
        logger.debug("Created client session %s", session.id)
        return session

    def get(self, session_id: str) -> ClientSession | None:
        """Look up a live session and mark it as seen. Expired sessions are discarded."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session, time.monotonic()):
            self.discard(session_id)
            return None
        session.touch()
        return session

    def prune(self) -> int:
        """Discard every expired session. Returns how many were removed."""
        now = time.monotonic()
        expired = [sid for sid, session in self._sessions.items() if self._expired(session, now)]
        for session_id in expired:
            self.discard(session_id)
        if expired:
            logger.info("Pruned %d expired client session(s)", len(expired))
        return len(expired)

    def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()

    def close(self) -> None:
        for session_id in list(self._sessions):
            self.discard(session_id)

    def __len__(self) -> int:
        return len(self._sessions)


@lru_cache
def get_session_registry() -> SessionRegistry:
    """Get the process-wide session registry."""
    return SessionRegistry()
