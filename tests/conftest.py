import os
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

# keep the module-level app off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient

from leaveflow.db import EmployeeRecord, LeaveRequestRecord, build_session_factory, create_db_engine, init_db
from leaveflow.lifecycle import LeaveRequestService
from leaveflow.main import create_app
from leaveflow.schemas import LeaveStatus, Role
from leaveflow.settings import Settings

TODAY = date(2025, 2, 1)

EMPLOYEE_ID = 1
MANAGER_ID = 2
OTHER_EMPLOYEE_ID = 3


def seed_employees(factory):
    with factory() as session:
        session.add_all(
            [
                EmployeeRecord(id=EMPLOYEE_ID, name="Alex Employee", email="alex@company.com", role=Role.EMPLOYEE),
                EmployeeRecord(id=MANAGER_ID, name="Morgan Manager", email="morgan@company.com", role=Role.MANAGER),
                EmployeeRecord(id=OTHER_EMPLOYEE_ID, name="Sam Employee", email="Sam@Company.com", role=Role.EMPLOYEE),
            ]
        )
        session.commit()


def insert_request(factory, *, employee_id, start, end, status, reason="seeded"):
    with factory() as session:
        record = LeaveRequestRecord(employee_id=employee_id, start_date=start, end_date=end, reason=reason, status=status)
        session.add(record)
        session.commit()
        return record.id


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    factory = build_session_factory(engine)
    seed_employees(factory)
    yield factory
    engine.dispose()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def service(session_factory, settings):
    return LeaveRequestService(session_factory, settings, clock=lambda: TODAY)


@pytest.fixture
def client(session_factory, settings):
    app = create_app(settings, session_factory, clock=lambda: TODAY)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def approved(session_factory):
    def _approved(employee_id, start, end):
        return insert_request(session_factory, employee_id=employee_id, start=start, end=end, status=LeaveStatus.APPROVED)

    return _approved
