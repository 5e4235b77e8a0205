"""Dashboard aggregation over a user's tenders and milestones.

``build_dashboard`` is pure: it takes already loaded rows and the reference time,
so the numbers can be checked without a database.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.core.config import settings
from tenderdesk.app.modules.milestones.models import Milestone
from tenderdesk.app.modules.milestones.workflow import MilestoneStatus
from tenderdesk.app.modules.tenders.models import Tender
from tenderdesk.app.modules.tenders.status import STATUS_GROUPS, TenderStatus, normalize_status

from . import schemas
from .models import DashboardSettings

logger = logging.getLogger(__name__)

_OPEN_MILESTONE = {MilestoneStatus.PENDING.value, MilestoneStatus.IN_PROGRESS.value}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _percentage(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return int(round(part / whole * 100))


def success_rate(won: int, lost: int) -> int:
    """Won share of decided tenders in percent; 0 while nothing is decided."""

    return _percentage(won, won + lost)


def _status_of(tender: Any) -> Optional[TenderStatus]:
    try:
        return normalize_status(tender.status)
    except ValueError:
        logger.warning(f"Tender {getattr(tender, 'id', '?')} has unknown status {tender.status!r}")
        return None


def _last_months(now: datetime, count: int) -> List[tuple[int, int]]:
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def status_stats(statuses: Sequence[Optional[TenderStatus]]) -> List[schemas.StatusStat]:
    counts = Counter(s for s in statuses if s is not None)
    total = len(statuses)
    return [
        schemas.StatusStat(
            status=status,
            label=status.label(),
            count=counts[status],
            percentage=_percentage(counts[status], total),
        )
        for status in TenderStatus
    ]


def monthly_stats(tenders: Iterable[Any], *, now: datetime, months: int) -> List[schemas.MonthlyStat]:
    buckets = {key: {"created": 0, "won": 0, "lost": 0} for key in _last_months(now, months)}
    for tender in tenders:
        if tender.created_at is None:
            continue
        created = _as_utc(tender.created_at)
        bucket = buckets.get((created.year, created.month))
        if bucket is None:
            continue
        bucket["created"] += 1
        status = _status_of(tender)
        if status is TenderStatus.WON:
            bucket["won"] += 1
        elif status is TenderStatus.LOST:
            bucket["lost"] += 1
    return [
        schemas.MonthlyStat(month=f"{year:04d}-{month:02d}", **values)
        for (year, month), values in buckets.items()
    ]


def upcoming_milestones(
    milestones: Iterable[Any],
    tender_titles: dict,
    *,
    now: datetime,
    limit: int,
) -> List[schemas.UpcomingMilestone]:
    """Open milestones with a due date, soonest first."""

    today = now.date()
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    candidates = [m for m in milestones if m.status in _OPEN_MILESTONE and m.due_date is not None]
    candidates.sort(key=lambda m: _as_utc(m.due_date))
    items = []
    for milestone in candidates[:limit]:
        due = _as_utc(milestone.due_date)
        items.append(
            schemas.UpcomingMilestone(
                id=milestone.id,
                tender_id=milestone.tender_id,
                tender_title=tender_titles.get(milestone.tender_id, ""),
                title=milestone.title,
                status=MilestoneStatus(milestone.status),
                due_date=due,
                is_overdue=due < start_of_today,
                days_left=(due.date() - today).days,
            )
        )
    return items


def build_dashboard(
    tenders: Sequence[Any],
    milestones: Iterable[Any],
    *,
    now: Optional[datetime] = None,
    upcoming_limit: int = 10,
    months: int = 6,
) -> schemas.DashboardData:
    now = _as_utc(now or datetime.now(tz=timezone.utc))
    statuses = [_status_of(t) for t in tenders]

    won = statuses.count(TenderStatus.WON)
    lost = statuses.count(TenderStatus.LOST)
    return schemas.DashboardData(
        total_tenders=len(tenders),
        active_tenders=sum(1 for s in statuses if s in STATUS_GROUPS["active"]),
        submitted_tenders=sum(1 for s in statuses if s in STATUS_GROUPS["submitted"]),
        won_tenders=won,
        lost_tenders=lost,
        success_rate=success_rate(won, lost),
        status_stats=status_stats(statuses),
        monthly_stats=monthly_stats(tenders, now=now, months=months),
        upcoming_milestones=upcoming_milestones(
            milestones,
            {t.id: t.title for t in tenders},
            now=now,
            limit=upcoming_limit,
        ),
    )


def get_dashboard(db: Session, owner_id: int, *, now: Optional[datetime] = None) -> schemas.DashboardData:
    tenders = list(db.scalars(select(Tender).where(Tender.owner_id == owner_id)))
    milestones = list(
        db.scalars(
            select(Milestone)
            .join(Tender, Milestone.tender_id == Tender.id)
            .where(Tender.owner_id == owner_id)
        )
    )
    return build_dashboard(
        tenders,
        milestones,
        now=now,
        upcoming_limit=settings.dashboard_upcoming_limit,
        months=settings.dashboard_months,
    )


# ------------------------------------------------------------------ settings


def get_dashboard_settings(db: Session, user_id: int) -> Optional[DashboardSettings]:
    stmt = select(DashboardSettings).where(DashboardSettings.user_id == user_id)
    return db.scalars(stmt).first()


def save_dashboard_settings(db: Session, user_id: int, payload: schemas.DashboardSettingsUpdate) -> DashboardSettings:
    """Create the user's settings row or overwrite the existing one."""

    row = get_dashboard_settings(db, user_id)
    if row is None:
        row = DashboardSettings(user_id=user_id)
        db.add(row)
    row.favorite_metrics = list(payload.favorite_metrics)
    row.layout_config = payload.layout_config
    row.updated_at = datetime.now(tz=timezone.utc)
    db.commit()
    db.refresh(row)
    logger.info(f"Saved dashboard settings for user {user_id}")
    return row
