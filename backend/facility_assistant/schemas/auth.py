"""Authentication schemas."""

from pydantic import BaseModel, Field

from facility_assistant.db.models import Role
from facility_assistant.schemas.base import BaseSchema
from facility_assistant.services.authenticator import AuthState, ResetStep


class RoleSelectRequest(BaseSchema):
    """Pick the portal (student or admin) before logging in or registering."""

    role: Role


class RegisterRequest(BaseSchema):
    """Create an account. Admin registrations must carry the admin code."""

    username: str = Field("", max_length=255)
    password: str = Field("", max_length=255)
    role: Role | None = None
    admin_code: str | None = None


class LoginRequest(BaseSchema):
    username: str = Field("", max_length=255)
    password: str = Field("", max_length=255)


class FindAccountRequest(BaseSchema):
    username: str = Field("", max_length=255)


class PasswordResetRequest(BaseSchema):
    username: str = Field("", max_length=255)
    new_password: str = Field("", max_length=255)
    admin_code: str | None = None


class AuthResponse(BaseModel):
    """Outcome of an authentication step, with the inline form message."""

    success: bool
    message: str
    role: Role | None = None


class AccountRead(BaseSchema):
    """Public view of an account. Never includes the password."""

    username: str
    role: Role


class SessionStateRead(BaseModel):
    """Where the client currently is in the login / reset flow."""

    state: AuthState
    selected_role: Role | None = None
    reset_step: ResetStep
    reset_role: Role | None = None
    account: AccountRead | None = None
