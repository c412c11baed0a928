from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Mapping, Optional

from sqlalchemy.orm import Session, sessionmaker

from .authz import Authorizer, DirectoryAuthorizer
from .db import LeaveRequestRecord, session_scope
from .directory import Directory
from .errors import InvalidState, LeaveError, NotFound, Unauthorized
from .rules import ALLOWED_TRANSITIONS, DateRange, RuleContext, check_transition, parse_target_status, run_creation_rules
from .rules.common import violation
from .schemas import Employee, LeaveRequest, LeaveStatus
from .settings import Settings
from .store import LeaveRequestStore

logger = logging.getLogger(__name__)

Clock = Callable[[], date]
AuthorizerFactory = Callable[[Directory], Authorizer]
TransitionTable = Mapping[LeaveStatus, frozenset[LeaveStatus]]


class _EmployeeLocks:
    """Serializes creation per employee inside this process.

    Only ids that resolved to a real employee should be passed in; the map
    holds one lock per key for the life of the process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def get(self, employee_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(employee_id, threading.Lock())


def _to_model(record: LeaveRequestRecord) -> LeaveRequest:
    return LeaveRequest.model_validate(record)


class LeaveRequestService:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        settings: Settings,
        *,
        clock: Clock = date.today,
        authorizer_factory: AuthorizerFactory = DirectoryAuthorizer,
        transitions: TransitionTable = ALLOWED_TRANSITIONS,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.clock = clock
        self.authorizer_factory = authorizer_factory
        self.transitions = transitions
        self._locks = _EmployeeLocks()

    def _rejected(self, op: str, err: LeaveError, **ids) -> None:
        logger.info("[%s] rejected code=%s rule_id=%s %s", op, err.code, err.rule_id, " ".join(f"{k}={v}" for k, v in ids.items()))

    # --- queries -------------------------------------------------------

    def list_requests(self, caller_id: Optional[int]) -> list[LeaveRequest]:
        with session_scope(self.session_factory) as session:
            store = LeaveRequestStore(session)
            if caller_id is None:
                if not self.settings.ALLOW_ANONYMOUS_LIST:
                    err = violation("caller_required", Unauthorized, "A caller id is required to list leave requests")
                    self._rejected("list", err)
                    raise err
                return [_to_model(r) for r in store.list_all()]

            caller = self.authorizer_factory(Directory(session)).resolve_caller(caller_id)
            if caller.is_manager:
                records = store.list_all()
            else:
                records = store.list_for_employee(caller.id)
            return [_to_model(r) for r in records]

    def get_request(self, request_id: int) -> LeaveRequest:
        with session_scope(self.session_factory) as session:
            record = LeaveRequestStore(session).get(request_id)
            if record is None:
                raise violation("request_not_found", NotFound, "Leave request not found")
            return _to_model(record)

    def list_employees(self) -> list[Employee]:
        with session_scope(self.session_factory) as session:
            return Directory(session).list_all()

    def get_employee(self, employee_id: int) -> Employee:
        with session_scope(self.session_factory) as session:
            return Directory(session).resolve(employee_id)

    def find_employee_by_email(self, email: str) -> Employee:
        with session_scope(self.session_factory) as session:
            return Directory(session).find_by_email(email)

    # --- transitions ---------------------------------------------------

    def create_request(self, employee_id: int, start: date, end: date, reason: str) -> LeaveRequest:
        try:
            with session_scope(self.session_factory) as session:
                Directory(session).resolve(employee_id)
        except LeaveError as err:
            self._rejected("create", err, employee_id=employee_id)
            raise

        with self._locks.get(employee_id):
            try:
                with session_scope(self.session_factory) as session:
                    employee = Directory(session).resolve(employee_id)
                    store = LeaveRequestStore(session)
                    store.lock_employee(employee.id)

                    requested = DateRange(start_date=start, end_date=end)
                    ctx = RuleContext(
                        employee_id=employee.id,
                        requested=requested,
                        today=self.clock(),
                        approved=store.approved_ranges(employee.id, start, end),
                        max_leave_days=self.settings.MAX_LEAVE_DAYS,
                        allow_single_day=self.settings.ALLOW_SINGLE_DAY_REQUESTS,
                    )
                    status = run_creation_rules(ctx)
                    record = store.add(employee_id=employee.id, start=start, end=end, reason=reason, status=status)
                    created = _to_model(record)
            except LeaveError as err:
                self._rejected("create", err, employee_id=employee_id)
                raise

        logger.info(
            "[create] request_id=%s employee_id=%s duration=%s status=%s",
            created.id, created.employee_id, created.duration_days, created.status.value,
        )
        return created

    def set_status(self, request_id: int, actor_id: Optional[int], status: object) -> LeaveRequest:
        try:
            with session_scope(self.session_factory) as session:
                manager = self.authorizer_factory(Directory(session)).require_manager(actor_id)
                store = LeaveRequestStore(session)
                record = store.get(request_id)
                if record is None:
                    raise violation("request_not_found", NotFound, "Leave request not found")
                target = parse_target_status(status)
                previous = record.status
                check_transition(previous, target, self.transitions)
                store.set_status(record, target)
                updated = _to_model(record)
        except LeaveError as err:
            self._rejected("status", err, request_id=request_id, actor_id=actor_id)
            raise

        logger.info(
            "[status] request_id=%s manager_id=%s %s->%s",
            request_id, manager.id, previous.value, target.value,
        )
        return updated

    def cancel_request(self, request_id: int, employee_id: Optional[int]) -> None:
        try:
            with session_scope(self.session_factory) as session:
                store = LeaveRequestStore(session)
                record = store.get(request_id)
                if record is None or employee_id is None or record.employee_id != employee_id:
                    raise violation("not_owner", Unauthorized, "Not allowed to cancel this leave request")
                if record.status is not LeaveStatus.PENDING:
                    raise violation("not_pending", InvalidState, "Only pending requests can be canceled")
                store.remove(record)
        except LeaveError as err:
            self._rejected("cancel", err, request_id=request_id, employee_id=employee_id)
            raise

        logger.info("[cancel] request_id=%s employee_id=%s", request_id, employee_id)

    def delete_request(self, request_id: int, manager_id: Optional[int]) -> None:
        try:
            with session_scope(self.session_factory) as session:
                manager = self.authorizer_factory(Directory(session)).require_manager(manager_id)
                store = LeaveRequestStore(session)
                record = store.get(request_id)
                if record is None:
                    raise violation("request_not_found", NotFound, "Leave request not found")
                previous = record.status
                store.remove(record)
        except LeaveError as err:
            self._rejected("delete", err, request_id=request_id, manager_id=manager_id)
            raise

        logger.info("[delete] request_id=%s manager_id=%s status=%s", request_id, manager.id, previous.value)
