from __future__ import annotations

from ..errors import InvalidRange, OverlapConflict, PastDate
from ..schemas import LeaveStatus
from .common import RuleContext, violation


def date_range_rule(ctx: RuleContext) -> None:
    start, end = ctx.requested.start_date, ctx.requested.end_date
    inverted = start >= end if not ctx.allow_single_day else start > end
    if inverted:
        raise violation(
            "invalid_range",
            InvalidRange,
            "End date must be after start date" if not ctx.allow_single_day else "End date must not be before start date",
            hint="Swap the dates or pick a later end date.",
        )


def past_date_rule(ctx: RuleContext) -> None:
    if ctx.requested.start_date < ctx.today:
        raise violation(
            "past_date",
            PastDate,
            "Cannot create requests for past dates",
            hint=f"Pick a start date on or after {ctx.today.isoformat()}.",
        )


def overlap_rule(ctx: RuleContext) -> None:
    clash = next((r for r in ctx.approved if r.overlaps(ctx.requested)), None)
    if clash is not None:
        raise violation(
            "overlap_conflict",
            OverlapConflict,
            "Overlapping approved leave exists for this period",
            hint=f"Approved leave already covers {clash.start_date.isoformat()}..{clash.end_date.isoformat()}.",
        )


def initial_status(ctx: RuleContext) -> LeaveStatus:
    """Requests longer than the threshold are auto-rejected; everything else waits for a manager."""
    if ctx.duration > ctx.max_leave_days:
        return LeaveStatus.REJECTED
    return LeaveStatus.PENDING
