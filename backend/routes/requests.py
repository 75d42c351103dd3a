"""Time-off request routes — dashboard, calendar and team views all read here.

GET   /requests              → visible requests + stats, with dashboard filters
POST  /requests              → submit a request as the viewer
POST  /requests/refresh      → force a refetch from the remote API
GET   /requests/{id}         → single request, if visible to the viewer
PUT   /requests/{id}         → edit a pending request
PATCH /requests/{id}/status  → approve or reject
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from errors import NotFoundError
from models import (
    RequestDraft,
    RequestStatus,
    RequestType,
    RequestUpdate,
    StatusChange,
    TimeOffRequest,
    User,
)
from routes.deps import get_store, get_viewer
from services.store import LifecycleStore
from services.visibility import (
    can_approve,
    can_edit,
    filter_requests,
    request_stats,
    visible_requests,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize(request: TimeOffRequest, viewer: User) -> dict:
    data = request.to_wire()
    data["canApprove"] = can_approve(viewer, request)
    data["canEdit"] = can_edit(viewer, request)
    return data


def _listing(requests: list[TimeOffRequest], viewer: User, **filters) -> dict:
    visible = visible_requests(requests, viewer)
    filtered = filter_requests(visible, **filters)
    stats = request_stats(visible)
    _summary = (
        f"{len(filtered)} of {stats['total']} visible requests "
        f"({stats['pending']} pending, {stats['approved']} approved, {stats['rejected']} rejected)"
    )
    return {
        "_summary": _summary,
        "stats": stats,
        "requests": [_serialize(r, viewer) for r in filtered],
    }


@router.get("/requests")
async def list_requests(
    status: RequestStatus | None = Query(None),
    type: RequestType | None = Query(None),
    search: str | None = Query(None),
    start: date | None = Query(None),
    end: date | None = Query(None),
    viewer: User = Depends(get_viewer),
    store: LifecycleStore = Depends(get_store),
) -> dict:
    requests = await store.load()
    return _listing(requests, viewer, status=status, type=type, search=search, start=start, end=end)


@router.post("/requests", status_code=201)
async def create_request(
    draft: RequestDraft,
    viewer: User = Depends(get_viewer),
    store: LifecycleStore = Depends(get_store),
) -> dict:
    request = await store.add_request(draft, viewer)
    return _serialize(request, viewer)


@router.post("/requests/refresh")
async def refresh_requests(
    viewer: User = Depends(get_viewer),
    store: LifecycleStore = Depends(get_store),
) -> dict:
    requests = await store.load(force=True)
    return _listing(requests, viewer)


@router.get("/requests/{request_id}")
async def get_request(
    request_id: str,
    viewer: User = Depends(get_viewer),
    store: LifecycleStore = Depends(get_store),
) -> dict:
    request = await store.get(request_id)
    # Hide existence from viewers who may not see it
    if not visible_requests([request], viewer):
        raise NotFoundError(request_id)
    return _serialize(request, viewer)


@router.put("/requests/{request_id}")
async def edit_request(
    request_id: str,
    changes: RequestUpdate,
    viewer: User = Depends(get_viewer),
    store: LifecycleStore = Depends(get_store),
) -> dict:
    request = await store.update_request(request_id, changes, viewer)
    return _serialize(request, viewer)


@router.patch("/requests/{request_id}/status")
async def change_status(
    request_id: str,
    change: StatusChange,
    viewer: User = Depends(get_viewer),
    store: LifecycleStore = Depends(get_store),
) -> dict:
    request = await store.update_request_status(
        request_id, change.status, viewer, change.rejection_reason
    )
    return _serialize(request, viewer)
