"""API routes for the conversation log."""

from fastapi import APIRouter, HTTPException, status

from facility_assistant.api.deps import AdminSession, AuthenticatedSession
from facility_assistant.schemas.chat import (
    ChatMessageRequest,
    ChatMessageResponse,
    ChatTurnResponse,
    ConversationResponse,
    ReactionRequest,
    UtteranceResponse,
)
from facility_assistant.services.conversation import REACTION_EMOJIS
from facility_assistant.services.session_manager import ClientSession, GatewayBusyError, TurnResult

router = APIRouter(prefix="/chat", tags=["chat"])


# =============================================================================
# HELPERS
# =============================================================================


def turn_response(turn: TurnResult) -> ChatTurnResponse:
    return ChatTurnResponse(
        user_message=ChatMessageResponse.model_validate(turn.user_message),
        reply=ChatMessageResponse.model_validate(turn.reply),
        utterance=UtteranceResponse.model_validate(turn.utterance) if turn.utterance else None,
        failed=turn.failed,
    )


def _conversation(session: ClientSession) -> ConversationResponse:
    return ConversationResponse(
        messages=[ChatMessageResponse.model_validate(m) for m in session.conversation],
        busy=session.busy,
    )


def busy_conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Please wait for the current reply before sending another message.",
    )


# =============================================================================
# MESSAGES
# =============================================================================


@router.get("/messages", response_model=ConversationResponse)
async def list_messages(session: AuthenticatedSession) -> ConversationResponse:
    """Full log, starting with the greeting."""
    return _conversation(session)


@router.post("/messages", response_model=ChatTurnResponse)
async def send_message(request: ChatMessageRequest, session: AuthenticatedSession) -> ChatTurnResponse:
    """
    Send a message and wait for the assistant's reply.

    If the assistant is unreachable the reply is a fixed apology rather than
    an error status; ``failed`` is set so the client can tell the difference.
    """
    try:
        turn = await session.send_message(request.message)
    except GatewayBusyError:
        raise busy_conflict()
    return turn_response(turn)


@router.delete("/messages", response_model=ConversationResponse)
async def clear_messages(session: AdminSession) -> ConversationResponse:
    """Clear chat history back to the greeting. Admin only."""
    session.clear_chat()
    return _conversation(session)


@router.post("/messages/{message_id}/reactions", response_model=ConversationResponse)
async def add_reaction(
    message_id: str,
    request: ReactionRequest,
    session: AuthenticatedSession,
) -> ConversationResponse:
    """Add one to an emoji's count. Unknown message ids leave the log unchanged."""
    if request.emoji not in REACTION_EMOJIS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported reaction. Choose one of: {' '.join(REACTION_EMOJIS)}",
        )
    session.conversation.add_reaction(message_id, request.emoji)
    return _conversation(session)
