from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Callable, Optional

from fastapi import APIRouter, Body, FastAPI, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from .db import build_session_factory, create_db_engine, init_db
from .errors import LeaveError
from .issues import build_error_payload, from_leave_error, from_validation_errors, make_system_issue
from .lifecycle import LeaveRequestService, TransitionTable
from .rules import ALLOWED_TRANSITIONS
from .schemas import CreateLeaveRequest, Employee, LeaveRequest
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _service(request: Request) -> LeaveRequestService:
    return request.app.state.service


requests_router = APIRouter()
employees_router = APIRouter()


@requests_router.get("", response_model=list[LeaveRequest])
async def list_leave_requests(request: Request, employee_id: Optional[int] = Query(None, alias="employeeId")):
    return await run_in_threadpool(_service(request).list_requests, employee_id)


@requests_router.get("/{request_id}", response_model=LeaveRequest)
async def get_leave_request(request: Request, request_id: int):
    return await run_in_threadpool(_service(request).get_request, request_id)


@requests_router.post("", response_model=LeaveRequest, status_code=201)
async def create_leave_request(request: Request, payload: CreateLeaveRequest):
    svc = _service(request)
    return await run_in_threadpool(svc.create_request, payload.employee_id, payload.start_date, payload.end_date, payload.reason)


@requests_router.put("/{request_id}", status_code=204)
async def update_leave_status(
    request: Request,
    request_id: int,
    manager_id: Optional[int] = Query(None, alias="managerId"),
    status: Any = Body(None),
):
    await run_in_threadpool(_service(request).set_status, request_id, manager_id, status)
    return Response(status_code=204)


@requests_router.delete("/{request_id}", status_code=204)
async def cancel_leave_request(request: Request, request_id: int, employee_id: Optional[int] = Query(None, alias="employeeId")):
    await run_in_threadpool(_service(request).cancel_request, request_id, employee_id)
    return Response(status_code=204)


@requests_router.delete("/{request_id}/permanent", status_code=204)
async def delete_leave_request(request: Request, request_id: int, manager_id: Optional[int] = Query(None, alias="managerId")):
    await run_in_threadpool(_service(request).delete_request, request_id, manager_id)
    return Response(status_code=204)


@employees_router.get("", response_model=list[Employee])
async def list_employees(request: Request):
    return await run_in_threadpool(_service(request).list_employees)


@employees_router.get("/lookup", response_model=Employee)
async def find_employee(request: Request, email: str = Query(..., min_length=1)):
    return await run_in_threadpool(_service(request).find_employee_by_email, email)


@employees_router.get("/{employee_id}", response_model=Employee)
async def get_employee(request: Request, employee_id: int):
    return await run_in_threadpool(_service(request).get_employee, employee_id)


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker[Session]] = None,
    clock: Callable[[], date] = date.today,
    transitions: TransitionTable = ALLOWED_TRANSITIONS,
) -> FastAPI:
    settings = settings or get_settings()
    if session_factory is None:
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
        init_db(engine)
        session_factory = build_session_factory(engine)

    app = FastAPI(title="Leave Request Approvals", version=API_VERSION)
    app.state.settings = settings
    app.state.service = LeaveRequestService(session_factory, settings, clock=clock, transitions=transitions)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    @app.exception_handler(LeaveError)
    async def leave_error_handler(request: Request, err: LeaveError):
        payload = build_error_payload(err.status_code, err.message, [from_leave_error(err)], _request_id(request))
        return JSONResponse(status_code=err.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, err: RequestValidationError):
        issues = from_validation_errors(err.errors())
        payload = build_error_payload(422, "Request validation failed.", issues, _request_id(request))
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, err: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        issue = make_system_issue(
            code="internal_error",
            message="Internal service error.",
            hint="Retry. If the error persists, pass the request_id to support.",
        )
        payload = build_error_payload(500, "Internal service error.", [issue], _request_id(request))
        return JSONResponse(status_code=500, content=payload)

    @app.get("/api/health")
    async def api_health():
        return {"status": "ok"}

    @app.get("/api/version")
    async def api_version():
        return {
            "APP_ENV": settings.APP_ENV,
            "VERSION": API_VERSION,
            "MAX_LEAVE_DAYS": settings.MAX_LEAVE_DAYS,
        }

    app.include_router(requests_router, prefix="/api/leaverequests", tags=["Leave Requests"])
    # legacy frontend casing
    app.include_router(requests_router, prefix="/api/LeaveRequests", include_in_schema=False)
    app.include_router(employees_router, prefix="/api/employees", tags=["Employees"])
    return app


settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app(settings)
