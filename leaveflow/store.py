from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .db import EmployeeRecord, LeaveRequestRecord
from .rules import DateRange
from .schemas import LeaveStatus


class LeaveRequestStore:
    """Leave request persistence bound to one session (one transaction)."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, request_id: int) -> Optional[LeaveRequestRecord]:
        return self.session.get(LeaveRequestRecord, request_id)

    def list_all(self) -> list[LeaveRequestRecord]:
        stmt = select(LeaveRequestRecord).order_by(LeaveRequestRecord.start_date.desc(), LeaveRequestRecord.id.desc())
        return list(self.session.scalars(stmt).unique())

    def list_for_employee(self, employee_id: int) -> list[LeaveRequestRecord]:
        stmt = (
            select(LeaveRequestRecord)
            .where(LeaveRequestRecord.employee_id == employee_id)
            .order_by(LeaveRequestRecord.start_date.desc(), LeaveRequestRecord.id.desc())
        )
        return list(self.session.scalars(stmt).unique())

    def approved_ranges(self, employee_id: int, start: date, end: date) -> list[DateRange]:
        stmt = select(LeaveRequestRecord.start_date, LeaveRequestRecord.end_date).where(
            LeaveRequestRecord.employee_id == employee_id,
            LeaveRequestRecord.status == LeaveStatus.APPROVED,
            LeaveRequestRecord.start_date <= end,
            LeaveRequestRecord.end_date >= start,
        )
        return [DateRange(start_date=s, end_date=e) for s, e in self.session.execute(stmt)]

    def lock_employee(self, employee_id: int) -> None:
        # row lock on the owner; a no-op on backends without SELECT ... FOR UPDATE
        self.session.execute(
            select(EmployeeRecord.id).where(EmployeeRecord.id == employee_id).with_for_update()
        )

    def add(self, *, employee_id: int, start: date, end: date, reason: str, status: LeaveStatus) -> LeaveRequestRecord:
        record = LeaveRequestRecord(
            employee_id=employee_id,
            start_date=start,
            end_date=end,
            reason=reason,
            status=status,
        )
        self.session.add(record)
        self.session.flush()
        self.session.refresh(record)
        return record

    def set_status(self, record: LeaveRequestRecord, status: LeaveStatus) -> None:
        record.status = status
        self.session.flush()

    def remove(self, record: LeaveRequestRecord) -> None:
        self.session.delete(record)
        self.session.flush()
