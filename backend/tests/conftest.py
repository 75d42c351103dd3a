from __future__ import annotations

from datetime import datetime, timezone

import pytest

from errors import FetchError
from models import Role, User
from services.cache import TTLCache
from services.notifications import NotificationCenter
from services.repository import RequestRepository
from services.storage import MemoryStorage
from services.store import LifecycleStore


class ManualClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """In-memory stand-in for the remote time-off API."""

    def __init__(self):
        self.records: list[dict] = []
        self.notifications: list[dict] = []
        self.fail = False
        self.assign_ids = True
        self.calls: list[str] = []
        self._next_id = 100

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise FetchError("Cannot connect to server. Please check your connection.")

    async def get_requests(self) -> list[dict]:
        self._check("get_requests")
        return [dict(r) for r in self.records]

    async def create_request(self, payload: dict) -> dict:
        """Ignores the client id and assigns its own, like the real server."""
        self._check("create_request")
        if not self.assign_ids:
            self.records.append(payload)
            return {"message": "Request created successfully"}
        server_id = f"srv{self._next_id}"
        self._next_id += 1
        self.records.append({**payload, "id": server_id})
        return {"message": "Request created successfully", "id": server_id}

    async def update_request(self, request_id: str, payload: dict) -> dict:
        self._check("update_request")
        self.records = [payload if r["id"] == request_id else r for r in self.records]
        return {"message": "Request updated successfully"}

    async def update_request_status(self, request_id, status, rejection_reason=None) -> dict:
        self._check("update_request_status")
        for r in self.records:
            if r["id"] == request_id:
                r["status"] = status
                r["rejectionReason"] = rejection_reason
        return {"message": "Request updated successfully"}

    async def get_notifications(self) -> list[dict]:
        self._check("get_notifications")
        return [dict(n) for n in self.notifications]

    async def mark_notification_read(self, notification_id: str) -> None:
        self._check("mark_notification_read")
        for n in self.notifications:
            if n["id"] == notification_id:
                n["read"] = True

    async def mark_all_notifications_read(self) -> None:
        self._check("mark_all_notifications_read")
        for n in self.notifications:
            n["read"] = True

    def count(self, name: str) -> int:
        return self.calls.count(name)


def make_record(
    request_id: str,
    employee: User,
    type: str = "paid time off",
    status: str = "pending",
    start: str = "2025-02-15",
    end: str = "2025-02-17",
    reason: str = "Family vacation",
) -> dict:
    """A request as the remote API sends it."""
    return {
        "id": request_id,
        "employee": employee.to_wire(),
        "startDate": start,
        "endDate": end,
        "type": type,
        "reason": reason,
        "status": status,
        "createdAt": "2025-01-10 09:30:00",
        "updatedAt": "2025-01-10 09:30:00",
        "approvedBy": None,
        "rejectionReason": None,
    }


@pytest.fixture
def employee() -> User:
    return User(id="1", name="Juan Carranza", role=Role.EMPLOYEE, department="Engineering")


@pytest.fixture
def coworker() -> User:
    return User(id="3", name="Alissa Pryor", role=Role.EMPLOYEE, department="Marketing")


@pytest.fixture
def manager() -> User:
    return User(id="2", name="Ana Ramirez", role=Role.MANAGER, department="Engineering")


@pytest.fixture
def admin() -> User:
    return User(id="5", name="Admin User", role=Role.ADMIN, department="IT")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(ttl_seconds=30, clock=clock)


@pytest.fixture
def repository(source, cache) -> RequestRepository:
    return RequestRepository(source, cache)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def store(repository, storage, notifications) -> LifecycleStore:
    return LifecycleStore(
        repository,
        storage,
        notifications,
        clock=lambda: datetime(2025, 1, 20, 12, 0, tzinfo=timezone.utc),
    )
