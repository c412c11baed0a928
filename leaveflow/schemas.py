from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    EMPLOYEE = "Employee"
    MANAGER = "Manager"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Employee(_CamelModel):
    id: int
    name: str
    email: str
    role: Role

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER


class LeaveRequest(_CamelModel):
    id: int
    employee_id: int
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    employee: Optional[Employee] = None

    @computed_field(alias="durationDays")
    @property
    def duration_days(self) -> int:
        return leave_duration(self.start_date, self.end_date)


class CreateLeaveRequest(_CamelModel):
    employee_id: int = Field(..., description="Owning employee id")
    start_date: date = Field(..., description="YYYY-MM-DD")
    end_date: date = Field(..., description="YYYY-MM-DD")
    reason: str = Field("", description="Free-text reason")

    @field_validator("reason", mode="before")
    @classmethod
    def _normalize_reason(cls, value):
        if value is None:
            return ""
        return str(value).strip()


class Issue(BaseModel):
    severity: Literal["error", "warn", "info"] = "error"
    domain: Literal["lifecycle", "directory", "system"] = "lifecycle"
    category: str = "validation"
    code: str
    message: str
    rule_id: Optional[str] = None
    hint: Optional[str] = None


class Trace(BaseModel):
    request_id: str


class ErrorResponse(BaseModel):
    error: str
    status: int
    detail: str
    issues: list[Issue] = Field(default_factory=list)
    trace: Trace


def leave_duration(start: date, end: date) -> int:
    """Calendar days covered by the request, both endpoints included."""
    return (end - start).days + 1
