import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from conftest import EMPLOYEE_ID, MANAGER_ID, OTHER_EMPLOYEE_ID, insert_request
from leaveflow.errors import InvalidRange, InvalidState, InvalidStatus, NotFound, OverlapConflict, PastDate, Unauthorized
from leaveflow.lifecycle import LeaveRequestService
from leaveflow.schemas import LeaveStatus
from leaveflow.settings import Settings


def test_create_returns_pending_request_with_id(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 5), "Family trip")
    assert created.id is not None
    assert created.status is LeaveStatus.PENDING
    assert created.duration_days == 5
    assert created.employee.name == "Alex Employee"


def test_long_request_is_auto_rejected_then_manager_overrides(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 20), "Sabbatical")
    assert created.duration_days == 20
    assert created.status is LeaveStatus.REJECTED

    updated = service.set_status(created.id, MANAGER_ID, "Approved")
    assert updated.status is LeaveStatus.APPROVED
    assert service.get_request(created.id).status is LeaveStatus.APPROVED


def test_fifteen_days_is_not_auto_rejected(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 15), "")
    assert created.duration_days == 15
    assert created.status is LeaveStatus.PENDING


def test_unknown_employee_cannot_create(service):
    with pytest.raises(NotFound):
        service.create_request(99, date(2025, 3, 1), date(2025, 3, 2), "")


def test_inverted_range_and_past_date(service):
    with pytest.raises(InvalidRange):
        service.create_request(EMPLOYEE_ID, date(2025, 3, 5), date(2025, 3, 1), "")
    with pytest.raises(PastDate):
        service.create_request(EMPLOYEE_ID, date(2025, 1, 31), date(2025, 2, 3), "")


def test_overlap_with_approved_leave_conflicts(service):
    first = service.create_request(EMPLOYEE_ID, date(2025, 6, 1), date(2025, 6, 5), "")
    service.set_status(first.id, MANAGER_ID, "Approved")

    with pytest.raises(OverlapConflict):
        service.create_request(EMPLOYEE_ID, date(2025, 6, 4), date(2025, 6, 10), "")
    assert len(service.list_requests(EMPLOYEE_ID)) == 1


def test_overlap_with_pending_or_rejected_or_other_employee_is_fine(service, session_factory):
    insert_request(session_factory, employee_id=EMPLOYEE_ID, start=date(2025, 6, 1), end=date(2025, 6, 5), status=LeaveStatus.PENDING)
    insert_request(session_factory, employee_id=EMPLOYEE_ID, start=date(2025, 6, 1), end=date(2025, 6, 5), status=LeaveStatus.REJECTED)
    insert_request(session_factory, employee_id=OTHER_EMPLOYEE_ID, start=date(2025, 6, 1), end=date(2025, 6, 5), status=LeaveStatus.APPROVED)

    created = service.create_request(EMPLOYEE_ID, date(2025, 6, 3), date(2025, 6, 4), "")
    assert created.status is LeaveStatus.PENDING


def test_manager_can_reject_an_approved_request(service, approved):
    request_id = approved(EMPLOYEE_ID, date(2025, 4, 1), date(2025, 4, 2))
    service.set_status(request_id, MANAGER_ID, "rejected")
    assert service.get_request(request_id).status is LeaveStatus.REJECTED


def test_non_manager_cannot_set_status_and_nothing_changes(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    with pytest.raises(Unauthorized):
        service.set_status(created.id, EMPLOYEE_ID, "Approved")
    with pytest.raises(Unauthorized):
        service.set_status(created.id, 404, "Approved")
    with pytest.raises(Unauthorized):
        service.set_status(created.id, None, "Approved")
    assert service.get_request(created.id).status is LeaveStatus.PENDING


def test_set_status_precondition_order(service):
    with pytest.raises(NotFound):
        service.set_status(12345, MANAGER_ID, "garbage")
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    with pytest.raises(InvalidStatus):
        service.set_status(created.id, MANAGER_ID, "Pending")


def test_cancel_pending_request_by_owner(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    service.cancel_request(created.id, EMPLOYEE_ID)
    with pytest.raises(NotFound):
        service.get_request(created.id)


def test_cancel_hides_existence_of_other_employees_requests(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    with pytest.raises(Unauthorized) as foreign:
        service.cancel_request(created.id, OTHER_EMPLOYEE_ID)
    with pytest.raises(Unauthorized) as missing:
        service.cancel_request(98765, OTHER_EMPLOYEE_ID)
    assert str(foreign.value) == str(missing.value)
    assert foreign.value.rule_id == missing.value.rule_id
    assert service.get_request(created.id).status is LeaveStatus.PENDING


@pytest.mark.parametrize("status", [LeaveStatus.APPROVED, LeaveStatus.REJECTED])
def test_cancel_non_pending_is_invalid_state(service, session_factory, status):
    request_id = insert_request(session_factory, employee_id=EMPLOYEE_ID, start=date(2025, 3, 1), end=date(2025, 3, 2), status=status)
    with pytest.raises(InvalidState):
        service.cancel_request(request_id, EMPLOYEE_ID)
    assert service.get_request(request_id).status is status


@pytest.mark.parametrize("status", list(LeaveStatus))
def test_manager_delete_ignores_status(service, session_factory, status):
    request_id = insert_request(session_factory, employee_id=EMPLOYEE_ID, start=date(2025, 3, 1), end=date(2025, 3, 2), status=status)
    service.delete_request(request_id, MANAGER_ID)
    with pytest.raises(NotFound):
        service.get_request(request_id)


def test_delete_requires_manager_then_existing_request(service):
    created = service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    with pytest.raises(Unauthorized):
        service.delete_request(created.id, EMPLOYEE_ID)
    with pytest.raises(NotFound):
        service.delete_request(55555, MANAGER_ID)
    assert service.get_request(created.id).id == created.id


def test_list_scopes_by_role_and_orders_by_start_desc(service, session_factory):
    insert_request(session_factory, employee_id=EMPLOYEE_ID, start=date(2025, 3, 1), end=date(2025, 3, 2), status=LeaveStatus.PENDING)
    insert_request(session_factory, employee_id=EMPLOYEE_ID, start=date(2025, 5, 1), end=date(2025, 5, 2), status=LeaveStatus.PENDING)
    insert_request(session_factory, employee_id=OTHER_EMPLOYEE_ID, start=date(2025, 4, 1), end=date(2025, 4, 2), status=LeaveStatus.PENDING)

    own = service.list_requests(EMPLOYEE_ID)
    assert [r.start_date for r in own] == [date(2025, 5, 1), date(2025, 3, 1)]

    everything = service.list_requests(MANAGER_ID)
    assert [r.start_date for r in everything] == [date(2025, 5, 1), date(2025, 4, 1), date(2025, 3, 1)]


def test_list_unknown_caller_is_not_found(service):
    with pytest.raises(NotFound):
        service.list_requests(404)


def test_list_without_caller_fails_closed_by_default(service):
    with pytest.raises(Unauthorized):
        service.list_requests(None)


def test_list_without_caller_can_be_opened_in_dev(session_factory):
    svc = LeaveRequestService(session_factory, Settings(ALLOW_ANONYMOUS_LIST=True), clock=lambda: date(2025, 2, 1))
    insert_request(session_factory, employee_id=OTHER_EMPLOYEE_ID, start=date(2025, 4, 1), end=date(2025, 4, 2), status=LeaveStatus.PENDING)
    assert len(svc.list_requests(None)) == 1


def test_strict_single_day_setting(session_factory):
    svc = LeaveRequestService(session_factory, Settings(ALLOW_SINGLE_DAY_REQUESTS=False), clock=lambda: date(2025, 2, 1))
    with pytest.raises(InvalidRange):
        svc.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 1), "")


def test_today_is_read_per_call(session_factory, settings):
    today = {"value": date(2025, 2, 1)}
    svc = LeaveRequestService(session_factory, settings, clock=lambda: today["value"])
    svc.create_request(EMPLOYEE_ID, date(2025, 2, 10), date(2025, 2, 11), "")
    today["value"] = date(2025, 2, 20)
    with pytest.raises(PastDate):
        svc.create_request(EMPLOYEE_ID, date(2025, 2, 10), date(2025, 2, 11), "")


def test_directory_lookups(service):
    assert [e.id for e in service.list_employees()] == [EMPLOYEE_ID, MANAGER_ID, OTHER_EMPLOYEE_ID]
    assert service.get_employee(MANAGER_ID).is_manager
    assert service.find_employee_by_email("sam@company.COM").id == OTHER_EMPLOYEE_ID
    with pytest.raises(NotFound):
        service.get_employee(99)
    with pytest.raises(NotFound):
        service.find_employee_by_email("nobody@company.com")


def test_unknown_employee_ids_do_not_accumulate_locks(service):
    for employee_id in range(1000, 1050):
        with pytest.raises(NotFound):
            service.create_request(employee_id, date(2025, 3, 1), date(2025, 3, 2), "")
    assert service._locks._locks == {}

    service.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    assert set(service._locks._locks) == {EMPLOYEE_ID}


def test_service_honours_a_stricter_transition_table(session_factory, settings, approved):
    strict = {
        LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
        LeaveStatus.APPROVED: frozenset(),
        LeaveStatus.REJECTED: frozenset(),
    }
    svc = LeaveRequestService(session_factory, settings, clock=lambda: date(2025, 2, 1), transitions=strict)
    request_id = approved(EMPLOYEE_ID, date(2025, 4, 1), date(2025, 4, 2))

    with pytest.raises(InvalidState):
        svc.set_status(request_id, MANAGER_ID, "Rejected")
    assert svc.get_request(request_id).status is LeaveStatus.APPROVED

    created = svc.create_request(EMPLOYEE_ID, date(2025, 3, 1), date(2025, 3, 2), "")
    assert svc.set_status(created.id, MANAGER_ID, "Approved").status is LeaveStatus.APPROVED
