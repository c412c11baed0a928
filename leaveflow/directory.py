from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .db import EmployeeRecord
from .errors import NotFound
from .rules.common import violation
from .schemas import Employee


class Directory:
    """Read-only employee lookup."""

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, employee_id: int) -> Employee:
        record = self.session.get(EmployeeRecord, employee_id)
        if record is None:
            raise violation("employee_not_found", NotFound, "Employee not found")
        return Employee.model_validate(record)

    def find_by_email(self, email: str) -> Employee:
        needle = (email or "").strip().lower()
        record = self.session.scalars(
            select(EmployeeRecord).where(func.lower(EmployeeRecord.email) == needle)
        ).first()
        if record is None:
            raise violation("employee_not_found", NotFound, "Employee not found")
        return Employee.model_validate(record)

    def list_all(self) -> list[Employee]:
        records = self.session.scalars(select(EmployeeRecord).order_by(EmployeeRecord.id))
        return [Employee.model_validate(r) for r in records]
