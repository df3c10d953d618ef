"""
Facility Assistant FastAPI Application Entry Point.

Run with: uvicorn facility_assistant.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from facility_assistant.config import get_settings
from facility_assistant.api.routes import (
    assistant,
    auth,
    chat,
    problems,
    voice,
)
from facility_assistant.services import chat_service, get_session_registry
from facility_assistant.services.credential_store import get_credential_store

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup: load (or seed) the account list once
    store = get_credential_store()
    logger.info("Loaded %d account(s)", len(store))
    yield
    # Shutdown: voice bridges are owned by client sessions
    get_session_registry().close()
    await chat_service.close()


app = FastAPI(
    title=settings.app_name,
    description="Campus facility assistant: chat, speech I/O and problem tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Session-Token"],
)

# Include routers
app.include_router(auth.router)
app.include_router(chat.router)
app.include_router(problems.router)
app.include_router(voice.router)
app.include_router(assistant.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """The assistant gateway answers malformed bodies with its own {error} shape."""
    if request.url.path.startswith(assistant.router.prefix):
        logger.warning("Rejected malformed assistant request: %s", exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body."},
        )
    return await request_validation_exception_handler(request, exc)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
