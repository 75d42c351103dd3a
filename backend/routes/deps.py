"""Shared route dependencies: the session's services and the current viewer."""

from fastapi import Header, Request

from errors import ForbiddenError
from models import Role, User
from services.notifications import NotificationCenter
from services.repository import RequestRepository
from services.store import LifecycleStore


def get_store(request: Request) -> LifecycleStore:
    return request.app.state.store


def get_repository(request: Request) -> RequestRepository:
    return request.app.state.repository


def get_notifications(request: Request) -> NotificationCenter:
    return request.app.state.notifications


def get_viewer(
    x_user_id: str | None = Header(None),
    x_user_role: Role = Header(Role.EMPLOYEE),
    x_user_name: str = Header(""),
    x_user_department: str | None = Header(None),
) -> User:
    """Viewer identity forwarded by the authenticating proxy."""
    if not x_user_id:
        raise ForbiddenError("Missing X-User-Id header", status_code=401)
    return User(id=x_user_id, name=x_user_name, role=x_user_role, department=x_user_department)
