from datetime import datetime, timezone

import pytest

from facility_assistant.db.models import Problem, ProblemPriority, ProblemStatus
from facility_assistant.services.tickets import ProblemTicketBoard


@pytest.fixture
def board() -> ProblemTicketBoard:
    return ProblemTicketBoard(
        [
            Problem(
                id="PRB-001",
                description="Leaking tap",
                location="Library restroom",
                priority=ProblemPriority.LOW,
            ),
            Problem(
                id="PRB-002",
                description="Projector broken",
                location="Room 204",
                priority=ProblemPriority.HIGH,
                status=ProblemStatus.RESOLVED,
            ),
            Problem(
                id="PRB-003",
                description="Flickering lights",
                location="Gym",
                priority=ProblemPriority.MEDIUM,
                status=ProblemStatus.IN_PROGRESS,
            ),
            Problem(
                id="PRB-004",
                description="Broken chair",
                location="Library 2nd floor",
                priority=ProblemPriority.LOW,
                status=ProblemStatus.CLOSED,
            ),
        ]
    )


def _ids(problems) -> list[str]:
    return [p.id for p in problems]


def test_new_problem_defaults():
    problem = Problem(description="Wet floor", location="Cafeteria")

    assert problem.status is ProblemStatus.REPORTED
    assert problem.priority is ProblemPriority.MEDIUM
    assert problem.reported_at <= datetime.now(timezone.utc)
    assert problem.id


def test_delete_removes_only_matching_ticket(board: ProblemTicketBoard):
    board.delete("PRB-002")
    assert _ids(board.problems) == ["PRB-001", "PRB-003", "PRB-004"]

    board.delete("missing")
    assert len(board) == 3


def test_any_status_transition_is_allowed(board: ProblemTicketBoard):
    board.update_status("PRB-004", ProblemStatus.REPORTED)
    assert board.get("PRB-004").status is ProblemStatus.REPORTED

    board.update_status("PRB-004", ProblemStatus.RESOLVED)
    board.update_status("PRB-004", ProblemStatus.IN_PROGRESS)
    assert board.get("PRB-004").status is ProblemStatus.IN_PROGRESS

    assert board.update_status("missing", ProblemStatus.CLOSED) is None


def test_clear_resolved_and_closed_keeps_others_in_order(board: ProblemTicketBoard):
    assert board.has_resolved_or_closed()

    removed = board.clear_resolved_and_closed()

    assert removed == 2
    assert _ids(board.problems) == ["PRB-001", "PRB-003"]
    assert not board.has_resolved_or_closed()


def test_filter_defaults_return_everything(board: ProblemTicketBoard):
    assert _ids(board.filter("", "all", "all")) == _ids(board.problems)


def test_filter_matches_id_only_term(board: ProblemTicketBoard):
    assert _ids(board.filter("prb-003")) == ["PRB-003"]


def test_filter_search_is_case_insensitive_over_description_and_location(board: ProblemTicketBoard):
    assert _ids(board.filter("LIBRARY")) == ["PRB-001", "PRB-004"]
    assert _ids(board.filter("projector")) == ["PRB-002"]


def test_filter_combines_status_and_priority(board: ProblemTicketBoard):
    assert _ids(board.filter("library", priority=ProblemPriority.LOW, status=ProblemStatus.CLOSED)) == ["PRB-004"]
    assert _ids(board.filter(status="In Progress")) == ["PRB-003"]
    assert _ids(board.filter(priority=ProblemPriority.HIGH, status=ProblemStatus.REPORTED)) == []


def test_filter_is_lazy_and_repeatable(board: ProblemTicketBoard):
    first = board.filter("library")
    assert not isinstance(first, list)
    assert _ids(first) == _ids(board.filter("library"))
