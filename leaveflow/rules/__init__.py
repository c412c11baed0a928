from .common import DateRange, RuleContext
from .engine import run_creation_rules
from .transitions import ALLOWED_TRANSITIONS, check_transition, parse_target_status

__all__ = [
    "ALLOWED_TRANSITIONS",
    "DateRange",
    "RuleContext",
    "check_transition",
    "parse_target_status",
    "run_creation_rules",
]
