"""Tender status values, compatibility aliases and status groups."""

from __future__ import annotations

import enum
from typing import Dict, FrozenSet


class TenderStatus(str, enum.Enum):
    """The eight statuses a tender moves through."""

    DRAFT = "entwurf"
    IN_REVIEW = "in-pruefung"
    IN_PROGRESS = "in-bearbeitung"
    SUBMITTED = "abgegeben"
    CLARIFICATION = "aufklaerung"
    WON = "gewonnen"
    LOST = "verloren"
    CLOSED = "abgeschlossen"

    def label(self) -> str:
        mapping = {
            TenderStatus.DRAFT: "Entwurf",
            TenderStatus.IN_REVIEW: "In Prüfung",
            TenderStatus.IN_PROGRESS: "In Bearbeitung",
            TenderStatus.SUBMITTED: "Abgegeben",
            TenderStatus.CLARIFICATION: "Aufklärung",
            TenderStatus.WON: "Gewonnen",
            TenderStatus.LOST: "Verloren",
            TenderStatus.CLOSED: "Abgeschlossen",
        }
        return mapping.get(self, self.value)


STATUS_ALIASES: Dict[str, TenderStatus] = {
    "draft": TenderStatus.DRAFT,
    "active": TenderStatus.IN_PROGRESS,
    "submitted": TenderStatus.SUBMITTED,
    "clarification": TenderStatus.CLARIFICATION,
    "won": TenderStatus.WON,
    "lost": TenderStatus.LOST,
}

SUBMISSION_STATUSES: FrozenSet[TenderStatus] = frozenset(
    {
        TenderStatus.SUBMITTED,
        TenderStatus.CLARIFICATION,
        TenderStatus.WON,
        TenderStatus.LOST,
        TenderStatus.CLOSED,
    }
)

# "submissions" overlaps "submitted" and "completed"; the other four partition the statuses.
STATUS_GROUPS: Dict[str, FrozenSet[TenderStatus]] = {
    "active": frozenset({TenderStatus.IN_PROGRESS, TenderStatus.IN_REVIEW}),
    "draft": frozenset({TenderStatus.DRAFT}),
    "submitted": frozenset({TenderStatus.SUBMITTED, TenderStatus.CLARIFICATION}),
    "completed": frozenset({TenderStatus.WON, TenderStatus.LOST, TenderStatus.CLOSED}),
    "submissions": SUBMISSION_STATUSES,
}


def normalize_status(value: TenderStatus | str) -> TenderStatus:
    """Map a canonical value or an English alias to its ``TenderStatus``.

    Raises ``ValueError`` for anything else.
    """
    if isinstance(value, TenderStatus):
        return value
    raw = str(value).strip().lower()
    if raw in STATUS_ALIASES:
        return STATUS_ALIASES[raw]
    return TenderStatus(raw)
