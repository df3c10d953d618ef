"""
Assistant gateway endpoint.

POST /api/assistant takes ``{prompt, history}`` and answers ``{text}``. Any
failure, including a missing API key, is a well-formed ``{error}`` body with
a 500 status rather than an unhandled exception. A malformed body is a 400
with the same ``{error}`` shape.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from facility_assistant.schemas.chat import AssistantErrorResponse, AssistantRequest, AssistantResponse
from facility_assistant.services.chat_service import (
    AssistantGateway,
    GatewayError,
    MissingApiKeyError,
    chat_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["assistant"])


def get_gateway() -> AssistantGateway:
    return chat_service


@router.post(
    "/assistant",
    response_model=AssistantResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": AssistantErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": AssistantErrorResponse},
    },
)
async def generate(
    request: AssistantRequest,
    gateway: Annotated[AssistantGateway, Depends(get_gateway)],
):
    history = [item.model_dump(mode="json") for item in request.history]
    try:
        text = await gateway.generate_reply(request.prompt, history)
    except MissingApiKeyError:
        logger.error("Assistant request rejected: API key is not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "API key is not configured."},
        )
    except GatewayError:
        logger.exception("Error in assistant gateway")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to get response from AI."},
        )
    return AssistantResponse(text=text)
