"""
Login / registration / password-reset state machine.

States:
    ROLE_UNSELECTED -> AWAITING_CREDENTIALS -> AUTHENTICATED

with a parallel password reset flow:
    FIND_ACCOUNT -> RESET_CREDENTIAL

Every operation returns an AuthResult. Failures carry an AuthError code and
the inline message shown on the form; nothing raises past this module.

Known weaknesses, kept deliberately:
- Passwords are compared as plaintext (see CredentialStore.verify_password).
- Admin rights hinge on one shared static code, not per-user credentials.
"""

import logging
from dataclasses import dataclass
from enum import Enum as PyEnum

from facility_assistant.db.models import Account, Role
from facility_assistant.services.credential_store import CredentialStore, DuplicateUsernameError

logger = logging.getLogger(__name__)


class AuthState(str, PyEnum):
    ROLE_UNSELECTED = "role_unselected"
    AWAITING_CREDENTIALS = "awaiting_credentials"
    AUTHENTICATED = "authenticated"


class ResetStep(str, PyEnum):
    FIND_ACCOUNT = "find_account"
    RESET_CREDENTIAL = "reset_credential"


class AuthError(str, PyEnum):
    DUPLICATE_USERNAME = "duplicate_username"
    INVALID_CREDENTIALS = "invalid_credentials"
    USER_NOT_FOUND = "user_not_found"
    INVALID_ADMIN_CODE = "invalid_admin_code"
    MISSING_FIELDS = "missing_fields"


ERROR_MESSAGES: dict[AuthError, str] = {
    AuthError.DUPLICATE_USERNAME: "Username already exists.",
    AuthError.INVALID_CREDENTIALS: "Invalid username or password.",
    AuthError.USER_NOT_FOUND: "User not found. Please check the username.",
    AuthError.INVALID_ADMIN_CODE: "Invalid Admin Code.",
    AuthError.MISSING_FIELDS: "Please fill in all fields.",
}


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    error: AuthError | None = None
    role: Role | None = None

    @classmethod
    def ok(cls, message: str, *, role: Role | None = None) -> "AuthResult":
        return cls(success=True, message=message, role=role)

    @classmethod
    def fail(cls, error: AuthError) -> "AuthResult":
        return cls(success=False, message=ERROR_MESSAGES[error], error=error)


class SessionAuthenticator:
    """Per-client authentication state over a shared CredentialStore."""

    def __init__(self, store: CredentialStore, *, admin_code: str):
        self._store = store
        self._admin_code = admin_code
        self.selected_role: Role | None = None
        self.current_account: Account | None = None
        self.reset_step = ResetStep.FIND_ACCOUNT
        self.reset_role: Role | None = None

    @property
    def state(self) -> AuthState:
        if self.current_account is not None:
            return AuthState.AUTHENTICATED
        if self.selected_role is not None:
            return AuthState.AWAITING_CREDENTIALS
        return AuthState.ROLE_UNSELECTED

    @property
    def is_authenticated(self) -> bool:
        return self.current_account is not None

    def _admin_code_matches(self, admin_code: str | None) -> bool:
        return admin_code == self._admin_code

    # -------------------------------------------------------------------------
    # Role selection
    # -------------------------------------------------------------------------

    def select_role(self, role: Role) -> AuthResult:
        self.selected_role = Role(role)
        return AuthResult.ok(f"{self.selected_role.value.capitalize()} portal selected.", role=self.selected_role)

    def back(self) -> None:
        """Return to role selection without touching the store."""
        self.selected_role = None

    # -------------------------------------------------------------------------
    # Registration / login
    # -------------------------------------------------------------------------

    def register(
        self,
        username: str,
        password: str,
        role: Role | None = None,
        admin_code: str | None = None,
    ) -> AuthResult:
        """
        Create an account. Does not log in.

        ``role`` defaults to the role picked with select_role. Admin
        registrations must present the shared admin code; it is checked
        before the store is consulted.
        """
        role = Role(role) if role is not None else (self.selected_role or Role.STUDENT)
        if not username or not password:
            return AuthResult.fail(AuthError.MISSING_FIELDS)
        if role is Role.ADMIN and not self._admin_code_matches(admin_code):
            logger.info("Rejected admin registration for %r: bad admin code", username)
            return AuthResult.fail(AuthError.INVALID_ADMIN_CODE)

        try:
            self._store.add(Account(username=username, password=password, role=role))
        except DuplicateUsernameError:
            return AuthResult.fail(AuthError.DUPLICATE_USERNAME)

        logger.info("Registered %s account %r", role.value, username)
        return AuthResult.ok("Registration successful! Please log in.", role=role)

    def login(self, username: str, password: str) -> AuthResult:
        if not username or not password:
            return AuthResult.fail(AuthError.MISSING_FIELDS)

        account = self._store.find(username)
        if account is None or not self._store.verify_password(account, password):
            return AuthResult.fail(AuthError.INVALID_CREDENTIALS)

        self.current_account = account
        return AuthResult.ok("Login successful!", role=account.role)

    def logout(self) -> None:
        self.current_account = None
        self.selected_role = None
        self.reset_step = ResetStep.FIND_ACCOUNT
        self.reset_role = None

    # -------------------------------------------------------------------------
    # Password reset
    # -------------------------------------------------------------------------

    def find_account(self, username: str) -> AuthResult:
        account = self._store.find(username) if username else None
        if account is None:
            return AuthResult.fail(AuthError.USER_NOT_FOUND)

        self.reset_step = ResetStep.RESET_CREDENTIAL
        self.reset_role = account.role
        return AuthResult.ok(f"Resetting password for {account.username}.", role=account.role)

    def reset_credential(self, username: str, new_password: str, admin_code: str | None = None) -> AuthResult:
        """Overwrite the password of an existing account. Does not log in."""
        if not new_password:
            return AuthResult.fail(AuthError.MISSING_FIELDS)

        account = self._store.find(username)
        if account is None:
            return AuthResult.fail(AuthError.USER_NOT_FOUND)
        if account.role is Role.ADMIN and not self._admin_code_matches(admin_code):
            return AuthResult.fail(AuthError.INVALID_ADMIN_CODE)

        self._store.set_password(account, new_password)
        self.reset_step = ResetStep.FIND_ACCOUNT
        self.reset_role = None
        logger.info("Password reset for %r", account.username)
        return AuthResult.ok("Password has been reset successfully. Please log in.", role=account.role)
