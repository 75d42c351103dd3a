"""Role-based visibility and capability checks.

Every view narrows the request collection through `visible_requests` before
applying its own status/type/date/search filters. All functions here are
pure; the input list is never mutated.
"""

from datetime import date

from models import RequestStatus, TimeOffRequest, User


def visible_requests(requests: list[TimeOffRequest], viewer: User) -> list[TimeOffRequest]:
    """Managers and admins see everything; employees see only their own."""
    if viewer.is_manager:
        return list(requests)
    return [r for r in requests if r.employee.id == viewer.id]


def can_approve(viewer: User, request: TimeOffRequest) -> bool:
    return viewer.is_manager and request.is_pending and viewer.id != request.employee.id


def can_edit(viewer: User, request: TimeOffRequest) -> bool:
    return request.is_pending and (viewer.is_manager or viewer.id == request.employee.id)


def filter_requests(
    requests: list[TimeOffRequest],
    status: RequestStatus | None = None,
    type=None,
    search: str | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[TimeOffRequest]:
    """Dashboard filters, applied to an already role-filtered list.

    `start`/`end` keep requests whose date range overlaps the window.
    `search` matches employee name, reason or type, case-insensitively.
    """
    result = requests
    if status is not None:
        result = [r for r in result if r.status == status]
    if type is not None:
        result = [r for r in result if r.type == type]
    if start is not None:
        result = [r for r in result if r.end_date >= start]
    if end is not None:
        result = [r for r in result if r.start_date <= end]
    if search:
        needle = search.lower()
        result = [
            r for r in result
            if needle in r.employee.name.lower()
            or needle in r.reason.lower()
            or needle in r.type.value.replace("_", " ")
        ]
    return list(result)


def request_stats(requests: list[TimeOffRequest]) -> dict:
    return {
        "total": len(requests),
        "pending": sum(1 for r in requests if r.status == RequestStatus.PENDING),
        "approved": sum(1 for r in requests if r.status == RequestStatus.APPROVED),
        "rejected": sum(1 for r in requests if r.status == RequestStatus.REJECTED),
        "employees": len({r.employee.id for r in requests}),
    }
