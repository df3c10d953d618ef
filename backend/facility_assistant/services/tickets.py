"""Admin problem ticket board."""

from collections.abc import Iterator
from typing import Literal

from facility_assistant.db.models import Problem, ProblemPriority, ProblemStatus

ALL: Literal["all"] = "all"

_CLEARABLE = frozenset({ProblemStatus.RESOLVED, ProblemStatus.CLOSED})


class ProblemTicketBoard:
    """
    Ordered set of problem tickets for one client session.

    Status changes are unconstrained: any status may be set from any other.
    Nothing in the chat flow creates tickets; ``add`` is the only way in.
    """

    def __init__(self, problems: list[Problem] | None = None):
        self._problems: list[Problem] = list(problems or [])

    def add(self, problem: Problem) -> Problem:
        self._problems.append(problem)
        return problem

    def get(self, problem_id: str) -> Problem | None:
        for problem in self._problems:
            if problem.id == problem_id:
                return problem
        return None

    def delete(self, problem_id: str) -> None:
        self._problems = [p for p in self._problems if p.id != problem_id]

    def update_status(self, problem_id: str, status: ProblemStatus) -> Problem | None:
        problem = self.get(problem_id)
        if problem is not None:
            problem.status = ProblemStatus(status)
        return problem

    def has_resolved_or_closed(self) -> bool:
        return any(p.status in _CLEARABLE for p in self._problems)

    def clear_resolved_and_closed(self) -> int:
        """Drop every Resolved or Closed ticket. Returns how many were removed."""
        kept = [p for p in self._problems if p.status not in _CLEARABLE]
        removed = len(self._problems) - len(kept)
        self._problems = kept
        return removed

    def clear(self) -> None:
        self._problems = []

    def filter(
        self,
        search_term: str = "",
        status: ProblemStatus | Literal["all"] = ALL,
        priority: ProblemPriority | Literal["all"] = ALL,
    ) -> Iterator[Problem]:
        """
        Yield tickets matching all of:

        - ``search_term`` is a case-insensitive substring of the description,
          location or id (the empty term matches everything)
        - ``status`` equals the ticket status, or is "all"
        - ``priority`` equals the ticket priority, or is "all"
        """
        needle = search_term.lower()
        snapshot = list(self._problems)
        for problem in snapshot:
            if needle and not (
                needle in problem.description.lower()
                or needle in problem.location.lower()
                or needle in problem.id.lower()
            ):
                continue
            if status != ALL and problem.status != status:
                continue
            if priority != ALL and problem.priority != priority:
                continue
            yield problem

    @property
    def problems(self) -> list[Problem]:
        return list(self._problems)

    def __len__(self) -> int:
        return len(self._problems)
