"""
Speech input/output for a client session.

The actual recognition and synthesis happen in the browser (Web Speech API).
This module keeps the session-side rules: at most one utterance active, at
most one listening session, the selected voice and rate, and an explicit
"unsupported" answer when the engine lacks a capability.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)

MIN_SPEECH_RATE = 0.5
MAX_SPEECH_RATE = 2.0


class SpeechCapability(str, PyEnum):
    SPEECH_TO_TEXT = "speech_to_text"
    TEXT_TO_SPEECH = "text_to_speech"


class VoiceStatus(str, PyEnum):
    OK = "ok"
    UNSUPPORTED = "unsupported"
    BUSY = "busy"


@dataclass(frozen=True)
class Utterance:
    text: str
    rate: float
    voice_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))


def clamp_rate(rate: float) -> float:
    return round(min(MAX_SPEECH_RATE, max(MIN_SPEECH_RATE, float(rate))), 2)


class SpeechEngine(Protocol):
    def supports(self, capability: SpeechCapability) -> bool: ...

    def speak(self, utterance: Utterance) -> None: ...

    def cancel_speech(self) -> None: ...

    def start_listening(self) -> None: ...

    def stop_listening(self) -> None: ...

    def close(self) -> None: ...


class BrowserRelayEngine:
    """
    Engine that hands utterances to the browser.

    The pending utterance is fetched by the client, which speaks it. Queuing
    a new utterance replaces (cancels) the pending one. Recognition results
    are posted back by the client, so listening only flips local state.
    """

    def __init__(self):
        self.pending: Utterance | None = None
        self.listening = False

    def supports(self, capability: SpeechCapability) -> bool:
        return True

    def speak(self, utterance: Utterance) -> None:
        self.pending = utterance

    def cancel_speech(self) -> None:
        self.pending = None

    def take_pending(self) -> Utterance | None:
        utterance, self.pending = self.pending, None
        return utterance

    def start_listening(self) -> None:
        self.listening = True

    def stop_listening(self) -> None:
        self.listening = False

    def close(self) -> None:
        self.pending = None
        self.listening = False


class UnsupportedEngine:
    """Engine for clients without speech support."""

    def supports(self, capability: SpeechCapability) -> bool:
        return False

    def speak(self, utterance: Utterance) -> None:
        raise NotImplementedError

    def cancel_speech(self) -> None:
        pass

    def start_listening(self) -> None:
        raise NotImplementedError

    def stop_listening(self) -> None:
        pass

    def close(self) -> None:
        pass


# Engines selectable through the ``speech_engine`` setting.
SPEECH_ENGINES: dict[str, type[SpeechEngine]] = {
    "browser": BrowserRelayEngine,
    "unsupported": UnsupportedEngine,
}


class VoiceBridge:
    """Owned speech service for one client session."""

    def __init__(self, engine: SpeechEngine, *, voice_id: str | None = None, rate: float = 1.0):
        self.engine = engine
        self.voice_id = voice_id
        self.rate = clamp_rate(rate)
        self.listening = False
        self.current: Utterance | None = None
        self.closed = False

    def supports(self, capability: SpeechCapability) -> bool:
        return not self.closed and self.engine.supports(capability)

    def configure(self, *, voice_id: str | None = None, rate: float | None = None) -> None:
        if voice_id is not None:
            self.voice_id = voice_id
        if rate is not None:
            self.rate = clamp_rate(rate)

    # -------------------------------------------------------------------------
    # Text to speech
    # -------------------------------------------------------------------------

    def speak(self, text: str) -> Utterance | None:
        """Speak ``text``, cancelling whatever is currently being spoken."""
        if not self.supports(SpeechCapability.TEXT_TO_SPEECH):
            return None
        if self.current is not None:
            self.engine.cancel_speech()
        self.current = Utterance(text=text, rate=self.rate, voice_id=self.voice_id)
        self.engine.speak(self.current)
        return self.current

    def cancel_speech(self) -> None:
        if self.current is not None:
            self.engine.cancel_speech()
            self.current = None

    # -------------------------------------------------------------------------
    # Speech to text
    # -------------------------------------------------------------------------

    def toggle_listening(self, *, busy: bool = False) -> VoiceStatus:
        """Stop listening if active, otherwise start unless a reply is pending."""
        if not self.supports(SpeechCapability.SPEECH_TO_TEXT):
            return VoiceStatus.UNSUPPORTED
        if self.listening:
            self.stop_listening()
            return VoiceStatus.OK
        if busy:
            return VoiceStatus.BUSY
        self.engine.start_listening()
        self.listening = True
        return VoiceStatus.OK

    def stop_listening(self) -> None:
        if self.listening:
            self.engine.stop_listening()
            self.listening = False

    def close(self) -> None:
        if self.closed:
            return
        self.stop_listening()
        self.cancel_speech()
        self.engine.close()
        self.closed = True
        logger.debug("Voice bridge closed")
