"""Notification routes.

Remote notifications come through the repository cache; notifications raised
by this session's own mutations come from the in-process center. Both are
returned, local ones first.
"""

import logging

from fastapi import APIRouter, Depends

from routes.deps import get_notifications, get_repository, get_viewer
from services.notifications import NotificationCenter
from services.repository import RequestRepository

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_viewer)])


@router.get("/notifications")
async def list_notifications(
    repository: RequestRepository = Depends(get_repository),
    center: NotificationCenter = Depends(get_notifications),
) -> dict:
    remote = await repository.fetch_notifications()
    return {
        "session": [n.to_wire() for n in center.notifications],
        "remote": [n.to_wire() for n in remote],
        "unreadCount": center.unread_count + sum(1 for n in remote if not n.read),
    }


@router.get("/notifications/unread-count")
async def unread_count(
    repository: RequestRepository = Depends(get_repository),
    center: NotificationCenter = Depends(get_notifications),
) -> dict:
    remote = await repository.fetch_notifications()
    return {"count": center.unread_count + sum(1 for n in remote if not n.read)}


@router.patch("/notifications/read-all")
async def mark_all_read(
    repository: RequestRepository = Depends(get_repository),
    center: NotificationCenter = Depends(get_notifications),
) -> dict:
    center.mark_all_as_read()
    await repository.mark_all_notifications_read()
    return {"message": "All notifications marked as read"}


@router.patch("/notifications/{notification_id}/read")
async def mark_read(
    notification_id: str,
    repository: RequestRepository = Depends(get_repository),
    center: NotificationCenter = Depends(get_notifications),
) -> dict:
    if center.mark_as_read(notification_id):
        return {"message": "Notification marked as read"}
    await repository.mark_notification_read(notification_id)
    return {"message": "Notification marked as read"}
