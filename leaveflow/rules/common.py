from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional, Sequence, Type

from ..errors import LeaveError
from ..schemas import leave_duration
from .catalog import RULE_IDS


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date

    def overlaps(self, other: "DateRange") -> bool:
        # closed intervals: a shared day counts
        return self.start_date <= other.end_date and self.end_date >= other.start_date


@dataclass
class RuleContext:
    employee_id: int
    requested: DateRange
    today: date
    approved: Sequence[DateRange] = field(default_factory=tuple)
    max_leave_days: int = 15
    allow_single_day: bool = True

    @property
    def duration(self) -> int:
        return leave_duration(self.requested.start_date, self.requested.end_date)


def violation(rule_key: str, exc_type: Type[LeaveError], message: str, hint: Optional[str] = None) -> LeaveError:
    return exc_type(message, rule_id=RULE_IDS[rule_key], hint=hint)


RuleFunc = Callable[[RuleContext], None]
