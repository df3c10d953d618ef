"""
Voice routes.

Speech recognition and synthesis run in the browser. These endpoints keep
the session-side state: listening on/off, voice selection and rate, and the
next utterance the browser should speak.
"""

from fastapi import APIRouter, HTTPException, Response, status

from facility_assistant.api.deps import AdminSession, AuthenticatedSession
from facility_assistant.api.routes.chat import busy_conflict, turn_response
from facility_assistant.schemas.chat import UtteranceResponse
from facility_assistant.schemas.voice import (
    ListenToggleResponse,
    TranscriptRequest,
    TranscriptResponse,
    VoiceSettingsRead,
    VoiceSettingsUpdate,
)
from facility_assistant.services.session_manager import ClientSession, GatewayBusyError
from facility_assistant.services.voice_bridge import BrowserRelayEngine, SpeechCapability

router = APIRouter(prefix="/voice", tags=["voice"])


def _settings(session: ClientSession) -> VoiceSettingsRead:
    voice = session.voice
    return VoiceSettingsRead(
        voice_id=voice.voice_id,
        rate=voice.rate,
        listening=voice.listening,
        speech_to_text=voice.supports(SpeechCapability.SPEECH_TO_TEXT),
        text_to_speech=voice.supports(SpeechCapability.TEXT_TO_SPEECH),
    )


@router.get("/settings", response_model=VoiceSettingsRead)
async def get_voice_settings(session: AuthenticatedSession) -> VoiceSettingsRead:
    return _settings(session)


@router.put("/settings", response_model=VoiceSettingsRead)
async def update_voice_settings(request: VoiceSettingsUpdate, session: AdminSession) -> VoiceSettingsRead:
    """Change voice and rate. Only admins see the settings panel."""
    session.voice.configure(voice_id=request.voice_id, rate=request.rate)
    return _settings(session)


@router.post("/listen", response_model=ListenToggleResponse)
async def toggle_listening(session: AuthenticatedSession) -> ListenToggleResponse:
    """Toggle speech input. Starting is refused while a reply is pending."""
    result = session.toggle_listening()
    return ListenToggleResponse(status=result, listening=session.voice.listening)


@router.post("/transcript", response_model=TranscriptResponse)
async def submit_transcript(request: TranscriptRequest, session: AuthenticatedSession) -> TranscriptResponse:
    """Send a recognised transcript exactly like typed input."""
    if not session.voice.supports(SpeechCapability.SPEECH_TO_TEXT):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Speech recognition is not supported.",
        )
    try:
        turn = await session.submit_transcript(request.transcript)
    except GatewayBusyError:
        raise busy_conflict()
    return TranscriptResponse(turn=turn_response(turn) if turn else None)


@router.get(
    "/utterance",
    response_model=UtteranceResponse,
    responses={status.HTTP_204_NO_CONTENT: {"description": "Nothing to speak"}},
)
async def next_utterance(session: AuthenticatedSession):
    """Hand the pending utterance to the browser. Each utterance is returned once."""
    engine = session.voice.engine
    utterance = engine.take_pending() if isinstance(engine, BrowserRelayEngine) else None
    if utterance is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return UtteranceResponse.model_validate(utterance)
