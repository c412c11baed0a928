from __future__ import annotations

from typing import Mapping

from ..errors import InvalidState, InvalidStatus
from ..schemas import LeaveStatus
from .common import violation


REVIEW_TARGETS = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})

# Managers may move any request to any review outcome, including overriding
# an auto-rejection or reverting an approval.
ALLOWED_TRANSITIONS: Mapping[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: REVIEW_TARGETS,
    LeaveStatus.APPROVED: REVIEW_TARGETS,
    LeaveStatus.REJECTED: REVIEW_TARGETS,
}


def parse_target_status(value: object) -> LeaveStatus:
    text = str(value or "").strip().strip('"').lower()
    for status in REVIEW_TARGETS:
        if status.value.lower() == text:
            return status
    raise violation("invalid_status", InvalidStatus, "Invalid status. Must be 'Approved' or 'Rejected'.")


def check_transition(
    current: LeaveStatus,
    target: LeaveStatus,
    table: Mapping[LeaveStatus, frozenset[LeaveStatus]] = ALLOWED_TRANSITIONS,
) -> None:
    if target not in table.get(current, frozenset()):
        raise violation(
            "transition_not_allowed",
            InvalidState,
            f"Cannot move a {current.value} request to {target.value}",
        )
