"""
Domain records for the facility assistant.

Accounts are persisted through the flat store as plain dicts; chat messages
and problem tickets live in memory for the lifetime of a client session.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Any
from uuid import uuid4


# =============================================================================
# ENUMS
# =============================================================================


class Role(str, PyEnum):
    """Account role chosen at registration."""

    STUDENT = "student"
    ADMIN = "admin"


class Sender(str, PyEnum):
    """Author of a chat message."""

    USER = "user"
    BOT = "bot"


class ProblemPriority(str, PyEnum):
    """Urgency of a reported facility problem."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ProblemStatus(str, PyEnum):
    """Lifecycle status of a problem ticket. Any status may follow any other."""

    REPORTED = "Reported"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ACCOUNTS
# =============================================================================


@dataclass
class Account:
    """
    A registered user.

    The password is stored and compared as plaintext. Replace the comparison
    in CredentialStore.verify_password with a salted hash check before using
    this anywhere real.
    """

    username: str
    password: str
    role: Role = Role.STUDENT

    def to_dict(self) -> dict[str, str]:
        return {"username": self.username, "password": self.password, "role": self.role.value}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Account":
        return cls(
            username=str(payload["username"]),
            password=str(payload["password"]),
            role=Role(payload.get("role", Role.STUDENT.value)),
        )


# =============================================================================
# CHAT
# =============================================================================


@dataclass
class ChatMessage:
    """One turn in the conversation log. Only ``reactions`` is ever mutated."""

    sender: Sender
    text: str
    id: str = field(default_factory=_new_id)
    reactions: dict[str, int] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_history_item(self) -> dict[str, str]:
        """Sender/text pair as sent to the assistant gateway."""
        return {"sender": self.sender.value, "text": self.text}


# =============================================================================
# PROBLEM TICKETS
# =============================================================================


@dataclass
class Problem:
    """A reported facility issue tracked on the admin ticket board."""

    description: str
    location: str
    priority: ProblemPriority = ProblemPriority.MEDIUM
    status: ProblemStatus = ProblemStatus.REPORTED
    id: str = field(default_factory=_new_id)
    reported_at: datetime = field(default_factory=_utcnow)
