"""Problem ticket routes (admin only)."""

from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Query, status

from facility_assistant.api.deps import AdminSession
from facility_assistant.db.models import ProblemPriority, ProblemStatus
from facility_assistant.schemas.problems import (
    ClearResolvedResponse,
    ProblemListResponse,
    ProblemRead,
    ProblemStatusUpdate,
)

router = APIRouter(prefix="/problems", tags=["problems"])


@router.get("/", response_model=ProblemListResponse)
async def list_problems(
    session: AdminSession,
    q: str = "",
    status_filter: Annotated[ProblemStatus | Literal["all"], Query(alias="status")] = "all",
    priority: ProblemPriority | Literal["all"] = "all",
) -> ProblemListResponse:
    """
    List tickets on the board.

    Filters:
    - q: case-insensitive substring of description, location or id
    - status: a ticket status, or "all"
    - priority: a ticket priority, or "all"
    """
    board = session.tickets
    matches = [ProblemRead.model_validate(p) for p in board.filter(q, status_filter, priority)]
    return ProblemListResponse(
        problems=matches,
        total=len(board),
        has_resolved_or_closed=board.has_resolved_or_closed(),
    )


# Declared before /{problem_id} so "resolved" is not taken as an id.
@router.delete("/resolved", response_model=ClearResolvedResponse)
async def clear_resolved(session: AdminSession) -> ClearResolvedResponse:
    """Permanently delete every Resolved or Closed ticket."""
    return ClearResolvedResponse(removed=session.tickets.clear_resolved_and_closed())


@router.patch("/{problem_id}", response_model=ProblemRead)
async def update_problem_status(
    problem_id: str,
    request: ProblemStatusUpdate,
    session: AdminSession,
) -> ProblemRead:
    problem = session.tickets.update_status(problem_id, request.status)
    if problem is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Problem not found")
    return ProblemRead.model_validate(problem)


@router.delete("/{problem_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_problem(problem_id: str, session: AdminSession) -> None:
    """Delete a ticket. Deleting an unknown id is not an error."""
    session.tickets.delete(problem_id)
