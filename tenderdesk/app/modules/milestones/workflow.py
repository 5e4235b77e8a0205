"""Milestone workflow rules: status transitions, ordering and progress.

Everything here is pure and works on ORM rows and schema objects alike; only
the attributes ``status``, ``title`` and ``sequence_number`` are read.
"""

from __future__ import annotations

import enum
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence


class MilestoneStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


# requested status -> statuses it may be reached from (None: from anywhere)
_ALLOWED_FROM: Dict[MilestoneStatus, Optional[frozenset]] = {
    MilestoneStatus.PENDING: None,
    MilestoneStatus.IN_PROGRESS: None,
    MilestoneStatus.COMPLETED: frozenset({MilestoneStatus.IN_PROGRESS}),
    MilestoneStatus.SKIPPED: frozenset({MilestoneStatus.PENDING}),
}

# Workflow stages every new tender starts with, in order.
DEFAULT_WORKFLOW: Sequence[tuple[str, str]] = (
    ("Quick Check", "Check requirements and decide whether to bid"),
    ("Besichtigung", "Site visit of the tendered object"),
    ("Konzept", "Write the service concept"),
    ("Kalkulation", "Price calculation"),
    ("Dokumente prüfen", "Review all bid documents for completeness"),
    ("Ausschreibung einreichen", "Submit the bid"),
    ("Aufklärung", "Answer the contracting authority's questions"),
    ("Implementierung", "Start of the contract"),
)


def _as_status(value: Any) -> Optional[MilestoneStatus]:
    if isinstance(value, MilestoneStatus):
        return value
    try:
        return MilestoneStatus(str(value))
    except ValueError:
        return None


def can_update_milestone_status(current: Any, requested: Any) -> bool:
    """Whether a milestone in ``current`` status may move to ``requested``."""

    target = _as_status(requested)
    if target is None:
        return False
    allowed = _ALLOWED_FROM[target]
    if allowed is None:
        return True
    return _as_status(current) in allowed


def sequence_key(milestone: Any) -> float:
    value = getattr(milestone, "sequence_number", None)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return 0
    return value


def sort_milestones(milestones: Iterable[Any]) -> List[Any]:
    """Stable ascending sort by sequence number; missing or NaN counts as 0."""

    return sorted(milestones, key=sequence_key)


def milestone_progress(milestones: Sequence[Any]) -> int:
    """Percentage of completed milestones, rounded to a whole number."""

    total = len(milestones)
    if total == 0:
        return 0
    completed = sum(1 for m in milestones if _as_status(m.status) is MilestoneStatus.COMPLETED)
    return int(round(completed / total * 100))


def find_inconsistencies(milestones: Sequence[Any]) -> Dict[str, bool]:
    missing_title = any(not (m.title or "").strip() for m in milestones)
    missing_sequence = any(
        not isinstance(m.sequence_number, (int, float))
        or isinstance(m.sequence_number, bool)
        or math.isnan(m.sequence_number)
        for m in milestones
    )
    missing_status = any(not m.status for m in milestones)
    return {
        "missing_title": missing_title,
        "missing_sequence": missing_sequence,
        "missing_status": missing_status,
    }


def default_milestones() -> List[Dict[str, Any]]:
    """Field values for the default workflow; due dates are left for the user to set."""

    rows = []
    for index, (title, description) in enumerate(DEFAULT_WORKFLOW, start=1):
        rows.append(
            {
                "title": title,
                "description": description,
                "status": MilestoneStatus.PENDING.value,
                "sequence_number": index,
                "due_date": None,
            }
        )
    return rows
