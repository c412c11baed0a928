from __future__ import annotations

from typing import Optional


class LeaveError(RuntimeError):
    """Base class for every rule violation surfaced by the lifecycle engine."""

    code = "leave_error"
    status_code = 400
    category = "validation"

    def __init__(self, message: str, *, rule_id: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.rule_id = rule_id
        self.hint = hint


class NotFound(LeaveError):
    code = "not_found"
    status_code = 404
    category = "lookup"


class InvalidRange(LeaveError):
    code = "invalid_range"
    category = "dates"


class PastDate(LeaveError):
    code = "past_date"
    category = "dates"


class OverlapConflict(LeaveError):
    code = "overlap_conflict"
    status_code = 409
    category = "dates"


class Unauthorized(LeaveError):
    code = "unauthorized"
    status_code = 401
    category = "authorization"


class InvalidState(LeaveError):
    code = "invalid_state"
    category = "lifecycle"


class InvalidStatus(LeaveError):
    code = "invalid_status"
    category = "validation"
