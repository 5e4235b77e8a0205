"""Domain errors raised by the service layer.

Routers either catch these explicitly or let the handlers registered in
``tenderdesk.app.main`` turn them into JSON responses.
"""

from __future__ import annotations


class TenderDeskError(Exception):
    """Base class for service-layer failures."""

    status_code = 400


class NotFoundError(TenderDeskError):
    """Raised when a record does not exist or belongs to another user."""

    status_code = 404


class PermissionDeniedError(TenderDeskError):
    """Raised when a user touches a record only its author may change."""

    status_code = 403


class InvalidMilestoneTransitionError(TenderDeskError):
    """Raised when a milestone status change is not allowed from its current status."""

    status_code = 409

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Milestone cannot move from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class FolderNotEmptyError(TenderDeskError):
    """Raised when deleting a folder that still holds documents."""

    status_code = 409


class StorageError(TenderDeskError):
    """Raised when the file store cannot save, locate or remove an object."""

    status_code = 502
