from __future__ import annotations

import pytest

from tenderdesk.app.modules.documents.models import ApprovalStatus
from tenderdesk.app.modules.documents.review import aggregate_approval_status


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([], None),
        (["approved"], ApprovalStatus.APPROVED),
        (["approved", "approved"], ApprovalStatus.APPROVED),
        (["approved", "rejected"], ApprovalStatus.REJECTED),
        (["pending", "rejected"], ApprovalStatus.REJECTED),
        (["approved", "pending"], ApprovalStatus.PENDING),
        (["pending"], ApprovalStatus.PENDING),
    ],
)
def test_aggregate_approval_status(statuses, expected):
    assert aggregate_approval_status(statuses) is expected
