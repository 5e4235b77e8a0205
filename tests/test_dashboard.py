from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from tenderdesk.app.modules.dashboard.service import build_dashboard, success_rate

NOW = datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc)


def tender(tender_id, status, created_at=NOW, title=None):
    return SimpleNamespace(id=tender_id, title=title or f"Tender {tender_id}", status=status, created_at=created_at)


def milestone(milestone_id, status, due_date, tender_id=1, title="Kalkulation"):
    return SimpleNamespace(id=milestone_id, tender_id=tender_id, title=title, status=status, due_date=due_date)


@pytest.mark.parametrize(
    "won, lost, expected",
    [(0, 0, 0), (1, 0, 100), (0, 3, 0), (1, 1, 50), (2, 1, 67), (1, 2, 33)],
)
def test_success_rate(won, lost, expected):
    assert success_rate(won, lost) == expected


def test_totals_and_status_stats():
    tenders = [
        tender(1, "gewonnen"),
        tender(2, "gewonnen"),
        tender(3, "verloren"),
        tender(4, "in-bearbeitung"),
        tender(5, "in-pruefung"),
        tender(6, "abgegeben"),
        tender(7, "aufklaerung"),
        tender(8, "entwurf"),
    ]
    data = build_dashboard(tenders, [], now=NOW)

    assert data.total_tenders == 8
    assert data.active_tenders == 2
    assert data.submitted_tenders == 2
    assert data.won_tenders == 2
    assert data.lost_tenders == 1
    assert data.success_rate == 67

    stats = {s.status.value: s for s in data.status_stats}
    assert len(data.status_stats) == 8
    assert stats["gewonnen"].count == 2
    assert stats["gewonnen"].percentage == 25
    assert stats["abgeschlossen"].count == 0
    assert stats["abgeschlossen"].percentage == 0


def test_empty_dashboard_has_zero_percentages():
    data = build_dashboard([], [], now=NOW)
    assert data.total_tenders == 0
    assert data.success_rate == 0
    assert all(s.percentage == 0 for s in data.status_stats)
    assert data.upcoming_milestones == []


def test_monthly_stats_cover_last_six_months():
    tenders = [
        tender(1, "gewonnen", created_at=datetime(2024, 6, 1, tzinfo=timezone.utc)),
        tender(2, "verloren", created_at=datetime(2024, 6, 2, tzinfo=timezone.utc)),
        tender(3, "entwurf", created_at=datetime(2024, 1, 31, 23, 0)),
        tender(4, "gewonnen", created_at=datetime(2023, 12, 31, tzinfo=timezone.utc)),
    ]
    data = build_dashboard(tenders, [], now=NOW)

    assert [m.month for m in data.monthly_stats] == ["2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"]
    june = data.monthly_stats[-1]
    assert (june.created, june.won, june.lost) == (2, 1, 1)
    assert data.monthly_stats[0].created == 1


def test_upcoming_milestones_are_open_sorted_and_capped():
    milestones = [
        milestone(1, "pending", NOW + timedelta(days=3)),
        milestone(2, "in-progress", NOW - timedelta(days=2)),
        milestone(3, "completed", NOW + timedelta(days=1)),
        milestone(4, "skipped", NOW + timedelta(days=1)),
        milestone(5, "pending", None),
        milestone(6, "pending", NOW.replace(hour=0, minute=5)),
    ]
    data = build_dashboard([tender(1, "in-bearbeitung", title="Rathaus")], milestones, now=NOW)

    upcoming = data.upcoming_milestones
    assert [u.id for u in upcoming] == [2, 6, 1]
    assert upcoming[0].is_overdue is True
    assert upcoming[0].days_left == -2
    # due earlier today is not overdue yet
    assert upcoming[1].is_overdue is False
    assert upcoming[1].days_left == 0
    assert upcoming[2].days_left == 3
    assert upcoming[2].tender_title == "Rathaus"


def test_upcoming_limit_is_applied():
    milestones = [milestone(i, "pending", NOW + timedelta(days=i)) for i in range(1, 15)]
    data = build_dashboard([tender(1, "entwurf")], milestones, now=NOW, upcoming_limit=10)
    assert len(data.upcoming_milestones) == 10
    assert data.upcoming_milestones[-1].id == 10
