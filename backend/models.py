"""Pydantic models for users, time-off requests and notifications.

Wire format is camelCase JSON with ISO-8601 date strings; Python attributes
are snake_case. Models validate by either name.
"""

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class RequestType(str, Enum):
    PAID_TIME_OFF = "paid_time_off"
    SICK_LEAVE = "sick_leave"
    TIME_EDIT = "time_edit"
    OTHER = "other"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _normalize_type(value):
    # The remote API spells types with spaces ("paid time off")
    if isinstance(value, str):
        return value.strip().lower().replace(" ", "_").replace("-", "_")
    return value


def _date_part(value):
    # JS clients send dates as full ISO timestamps ("2025-02-15T00:00:00.000Z")
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class User(WireModel):
    # approvedBy may arrive with only a name
    id: str = ""
    name: str = ""
    email: str | None = None
    role: Role = Role.EMPLOYEE
    department: str | None = None
    avatar: str | None = None

    @property
    def is_manager(self) -> bool:
        return self.role in (Role.MANAGER, Role.ADMIN)


class TimeOffRequest(WireModel):
    id: str
    employee: User
    type: RequestType
    start_date: date
    end_date: date
    reason: str
    status: RequestStatus = RequestStatus.PENDING
    approved_by: User | None = None
    rejection_reason: str | None = None
    original_clock_in: str | None = None
    original_clock_out: str | None = None
    requested_clock_in: str | None = None
    requested_clock_out: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        return _normalize_type(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def date_only(cls, value):
        return _date_part(value)

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


class RequestDraft(WireModel):
    """Input to the store's add operation. Presence checks happen in the store."""

    type: RequestType
    start_date: date | None = None
    end_date: date | None = None
    reason: str = ""
    original_clock_in: str | None = None
    original_clock_out: str | None = None
    requested_clock_in: str | None = None
    requested_clock_out: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        return _normalize_type(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def date_only(cls, value):
        return _date_part(value)


class RequestUpdate(WireModel):
    """Field edits allowed while a request is pending."""

    start_date: date | None = None
    end_date: date | None = None
    reason: str | None = None
    original_clock_in: str | None = None
    original_clock_out: str | None = None
    requested_clock_in: str | None = None
    requested_clock_out: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def date_only(cls, value):
        return _date_part(value)


class StatusChange(WireModel):
    status: RequestStatus
    rejection_reason: str | None = None


class Notification(WireModel):
    id: str
    type: NotificationType = NotificationType.INFO
    message: str
    read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
