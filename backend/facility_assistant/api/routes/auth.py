"""
Authentication Routes

Endpoints:
- POST /auth/role - Pick the student or admin portal
- POST /auth/back - Return to role selection
- POST /auth/register - Create an account (does not log in)
- POST /auth/login - Log in with username + password
- POST /auth/logout - Log out, reset the chat and clear the ticket board
- GET /auth/me - Current login state of this client session
- POST /auth/password-reset/find - Step 1 of password reset
- POST /auth/password-reset - Step 2 of password reset

Failures come back as 4xx with the inline form message in ``detail``.
"""

from fastapi import APIRouter, HTTPException, status

from facility_assistant.api.deps import AnySession
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
from facility_assistant.services.authenticator import AuthError, AuthResult
from facility_assistant.services.session_manager import ClientSession

router = APIRouter(prefix="/auth", tags=["auth"])

_ERROR_STATUS = {
    AuthError.DUPLICATE_USERNAME: status.HTTP_409_CONFLICT,
    AuthError.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthError.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthError.INVALID_ADMIN_CODE: status.HTTP_403_FORBIDDEN,
    AuthError.MISSING_FIELDS: status.HTTP_400_BAD_REQUEST,
}


def _respond(result: AuthResult) -> AuthResponse:
    if not result.success:
        raise HTTPException(status_code=_ERROR_STATUS[result.error], detail=result.message)
    return AuthResponse(success=True, message=result.message, role=result.role)


def _state(session: ClientSession) -> SessionStateRead:
    auth = session.auth
    account = auth.current_account
    return SessionStateRead(
        state=auth.state,
        selected_role=auth.selected_role,
        reset_step=auth.reset_step,
        reset_role=auth.reset_role,
        account=AccountRead.model_validate(account) if account else None,
    )


@router.post("/role", response_model=AuthResponse)
async def select_role(request: RoleSelectRequest, session: AnySession) -> AuthResponse:
    return _respond(session.auth.select_role(request.role))


@router.post("/back", response_model=SessionStateRead)
async def back_to_role_selection(session: AnySession) -> SessionStateRead:
    session.auth.back()
    return _state(session)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, session: AnySession) -> AuthResponse:
    """
    Register a new account.

    The role defaults to the portal chosen via /auth/role. Admin accounts
    need the shared admin code.
    """
    return _respond(
        session.auth.register(
            request.username,
            request.password,
            role=request.role,
            admin_code=request.admin_code,
        )
    )


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, session: AnySession) -> AuthResponse:
    return _respond(session.auth.login(request.username, request.password))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(session: AnySession) -> None:
    """
    Log out of this client session.

    The conversation goes back to the greeting and the in-memory ticket board
    is emptied. The session itself (and its cookie) stays valid.
    """
    session.logout()


@router.get("/me", response_model=SessionStateRead)
async def get_me(session: AnySession) -> SessionStateRead:
    return _state(session)


@router.post("/password-reset/find", response_model=AuthResponse)
async def find_account(request: FindAccountRequest, session: AnySession) -> AuthResponse:
    """Look up the account to reset; ``role`` tells the client whether an admin code is needed."""
    return _respond(session.auth.find_account(request.username))


@router.post("/password-reset", response_model=AuthResponse)
async def reset_password(request: PasswordResetRequest, session: AnySession) -> AuthResponse:
    return _respond(
        session.auth.reset_credential(
            request.username,
            request.new_password,
            admin_code=request.admin_code,
        )
    )
