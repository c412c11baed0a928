from __future__ import annotations

import logging

from ..schemas import LeaveStatus
from .catalog import RULE_IDS
from .common import RuleContext, RuleFunc
from .creation import date_range_rule, initial_status, overlap_rule, past_date_rule

logger = logging.getLogger(__name__)

CREATION_RULES: tuple[RuleFunc, ...] = (
    date_range_rule,
    past_date_rule,
    overlap_rule,
)


def run_creation_rules(ctx: RuleContext) -> LeaveStatus:
    """Apply the creation rules in order and return the status the new request starts in.

    The first violated rule raises; nothing after it runs.
    """
    for rule in CREATION_RULES:
        rule(ctx)
    status = initial_status(ctx)
    if status is LeaveStatus.REJECTED:
        logger.info(
            "[rules] auto_rejected rule_id=%s employee_id=%s duration=%s max=%s",
            RULE_IDS["auto_rejected"], ctx.employee_id, ctx.duration, ctx.max_leave_days,
        )
    return status
