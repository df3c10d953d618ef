"""
FastAPI dependencies binding requests to client sessions.

Key patterns:
1. get_existing_session: resolves the caller's ClientSession, if it has one
2. get_client_session: same, but starts a new session when there is none
3. get_authenticated_session: requires a logged-in account on an existing session
4. get_admin_session: same, but requires the admin role

Session model:
- Each browser gets one ClientSession, identified by a signed JWT whose
  subject is the session id
- The JWT travels in an HttpOnly cookie (preferred) or an Authorization header
- On the open auth endpoints a missing, invalid or unknown token silently
  starts a fresh session; protected endpoints answer 401 instead
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Cookie, Depends, Header, HTTPException, Response, status
from jose import JWTError, jwt

from facility_assistant.config import get_settings
from facility_assistant.db.models import Role
from facility_assistant.services.session_manager import (
    ClientSession,
    SessionRegistry,
    get_session_registry,
)

SESSION_COOKIE = "session_token"


# =============================================================================
# JWT UTILITIES
# =============================================================================


def create_session_token(session_id: str) -> str:
    """
    Create a JWT naming a client session.

    Token payload contains:
    - sub: the client session id
    - exp: expiration timestamp

    The token carries no account data; login state lives server-side in the
    session it points to.
    """
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": session_id, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> str | None:
    """Return the session id if the token is valid, None if invalid/expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    session_id = payload.get("sub")
    return session_id if isinstance(session_id, str) else None


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    # For cross-domain deployments, use samesite="none" + secure=True
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
        max_age=settings.jwt_expire_minutes * 60,
    )


# =============================================================================
# SESSION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    session_token: Annotated[str | None, Cookie()] = None,
) -> str | None:
    """
    Extract the session JWT from the request, if any.

    Supports two methods (in order of preference):
    1. HttpOnly cookie named 'session_token'
    2. Authorization header: 'Bearer <token>'
    """
    if session_token:
        return session_token

    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    return None


async def get_existing_session(
    token: Annotated[str | None, Depends(get_token_from_request)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ClientSession | None:
    """Resolve the caller's ClientSession without creating one."""
    if not token:
        return None
    session_id = decode_session_token(token)
    if session_id is None:
        return None
    return registry.get(session_id)


async def get_client_session(
    response: Response,
    existing: Annotated[ClientSession | None, Depends(get_existing_session)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ClientSession:
    """
    Resolve the caller's ClientSession, starting a new one when needed.

    A new session's token is set as a cookie on the response and echoed in
    the ``X-Session-Token`` header for clients that prefer bearer auth.
    """
    if existing is not None:
        return existing

    session = registry.create()
    new_token = create_session_token(session.id)
    set_session_cookie(response, new_token)
    response.headers["X-Session-Token"] = new_token
    return session


async def get_authenticated_session(
    session: Annotated[ClientSession | None, Depends(get_existing_session)],
) -> ClientSession:
    """
    Require a logged-in account on an existing client session (401 otherwise).

    Never starts a session: a caller without one has nothing to be logged in to.
    """
    if session is None or not session.auth.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


async def get_admin_session(
    session: Annotated[ClientSession, Depends(get_authenticated_session)],
) -> ClientSession:
    """Require an admin account (403 for students)."""
    if session.auth.current_account.role is not Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return session


# Type aliases for dependency injection
AnySession = Annotated[ClientSession, Depends(get_client_session)]
AuthenticatedSession = Annotated[ClientSession, Depends(get_authenticated_session)]
AdminSession = Annotated[ClientSession, Depends(get_admin_session)]
