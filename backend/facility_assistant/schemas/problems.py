"""Problem ticket schemas."""

from datetime import datetime

from pydantic import BaseModel

from facility_assistant.db.models import ProblemPriority, ProblemStatus
from facility_assistant.schemas.base import BaseSchema


class ProblemRead(BaseSchema):
    id: str
    description: str
    location: str
    priority: ProblemPriority
    status: ProblemStatus
    reported_at: datetime


class ProblemStatusUpdate(BaseSchema):
    status: ProblemStatus


class ProblemListResponse(BaseModel):
    """Filtered tickets plus board-level facts the admin view needs."""

    problems: list[ProblemRead]
    total: int
    has_resolved_or_closed: bool


class ClearResolvedResponse(BaseModel):
    removed: int
