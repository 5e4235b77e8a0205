from __future__ import annotations

import math
from types import SimpleNamespace

import pytest

from tenderdesk.app.modules.milestones.workflow import (
    DEFAULT_WORKFLOW,
    MilestoneStatus,
    can_update_milestone_status,
    default_milestones,
    find_inconsistencies,
    milestone_progress,
    sort_milestones,
)

STATUSES = [s.value for s in MilestoneStatus]


def expected_allowed(current: str, requested: str) -> bool:
    if requested in ("pending", "in-progress"):
        return True
    if requested == "completed":
        return current == "in-progress"
    if requested == "skipped":
        return current == "pending"
    return False


@pytest.mark.parametrize("current", STATUSES)
@pytest.mark.parametrize("requested", STATUSES)
def test_transition_table_matches_for_every_pair(current, requested):
    assert can_update_milestone_status(current, requested) is expected_allowed(current, requested)


def test_transition_accepts_enum_members():
    assert can_update_milestone_status(MilestoneStatus.IN_PROGRESS, MilestoneStatus.COMPLETED)
    assert not can_update_milestone_status(MilestoneStatus.PENDING, MilestoneStatus.COMPLETED)


@pytest.mark.parametrize("requested", ["done", "", None, "COMPLETED"])
def test_unknown_requested_status_is_rejected(requested):
    assert can_update_milestone_status("in-progress", requested) is False


def m(title="Konzept", status="pending", sequence_number=None):
    return SimpleNamespace(title=title, status=status, sequence_number=sequence_number)


def test_sort_is_ascending_and_stable():
    items = [m("c", sequence_number=3), m("a1", sequence_number=1), m("b", sequence_number=2), m("a2", sequence_number=1)]
    assert [x.title for x in sort_milestones(items)] == ["a1", "a2", "b", "c"]


def test_sort_treats_missing_and_nan_as_zero():
    items = [m("two", sequence_number=2), m("none"), m("nan", sequence_number=math.nan), m("one", sequence_number=1)]
    assert [x.title for x in sort_milestones(items)] == ["none", "nan", "one", "two"]


def test_progress_of_four_with_two_completed_is_fifty():
    items = [m(status="completed"), m(status="completed"), m(status="pending"), m(status="in-progress")]
    assert milestone_progress(items) == 50


def test_progress_rounds_and_handles_empty_list():
    assert milestone_progress([]) == 0
    assert milestone_progress([m(status="completed"), m(), m()]) == 33
    assert milestone_progress([m(status="completed"), m(status="completed"), m()]) == 67


def test_find_inconsistencies_flags_each_problem():
    clean = [m("Konzept", "pending", 1), m("Kalkulation", "completed", 2)]
    assert find_inconsistencies(clean) == {"missing_title": False, "missing_sequence": False, "missing_status": False}

    broken = [m("  ", "pending", 1), m("Kalkulation", "", math.nan)]
    assert find_inconsistencies(broken) == {"missing_title": True, "missing_sequence": True, "missing_status": True}


def test_default_milestones_follow_the_workflow():
    rows = default_milestones()
    assert [r["title"] for r in rows] == [title for title, _ in DEFAULT_WORKFLOW]
    assert [r["sequence_number"] for r in rows] == list(range(1, 9))
    assert {r["status"] for r in rows} == {"pending"}
    assert all(r["due_date"] is None for r in rows)
