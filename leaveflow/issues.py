from __future__ import annotations

from typing import Any, Iterable, Optional

from .errors import LeaveError, NotFound
from .schemas import ErrorResponse, Issue, Trace


_HINTS = {
    'not_found': 'Check the id and try again.',
    'unauthorized': 'Retry as the owning employee or as a manager.',
    'invalid_state': 'Only pending requests can change this way.',
    'invalid_status': "Send 'Approved' or 'Rejected'.",
}


def from_leave_error(err: LeaveError) -> Issue:
    domain = 'directory' if isinstance(err, NotFound) and (err.rule_id or '').startswith('DIR') else 'lifecycle'
    return Issue(
        severity='error',
        domain=domain,
        category=err.category,
        code=err.code,
        message=err.message,
        rule_id=err.rule_id,
        hint=err.hint or _HINTS.get(err.code),
    )


def make_system_issue(*, code: str, message: str, category: str = 'unknown', hint: Optional[str] = None) -> Issue:
    return Issue(severity='error', domain='system', category=category, code=code, message=message, hint=hint)


def from_validation_errors(errors: Iterable[dict[str, Any]]) -> list[Issue]:
    out: list[Issue] = []
    for e in errors:
        loc = '.'.join(str(p) for p in e.get('loc', ()) if p != 'body')
        out.append(
            make_system_issue(
                code='request_validation_error',
                category='validation',
                message=f"{loc}: {e.get('msg', 'invalid value')}" if loc else str(e.get('msg', 'invalid value')),
                hint='Dates use YYYY-MM-DD; ids are integers.',
            )
        )
    return out or [make_system_issue(code='request_validation_error', category='validation', message='Invalid request.')]


def build_trace(request_id: str) -> Trace:
    return Trace(request_id=request_id)


def build_error_payload(status: int, detail: str, issues: list[Issue], request_id: str) -> dict[str, Any]:
    return ErrorResponse(
        error=issues[0].code if issues else 'error',
        status=status,
        detail=detail,
        issues=issues,
        trace=build_trace(request_id),
    ).model_dump()
