"""Lifecycle store: the session's source of truth for time-off requests.

Owns every mutation of the request collection and enforces its rules:

* status moves only pending -> approved or pending -> rejected, both terminal
* a rejection always carries a reason
* nobody approves or rejects their own request, whatever their role
* ownership never changes

Each successful mutation is sent to the remote API, applied to the
in-memory list, persisted as a whole, and followed by invalidation of the
"requests" cache key so the next read goes to the remote (read-your-writes).
A failed remote write leaves local state untouched and drops the cache key,
so the next read resynchronizes.
"""

import json
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from errors import (
    FetchError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    SelfApprovalError,
    ValidationError,
)
from models import (
    NotificationType,
    RequestDraft,
    RequestStatus,
    RequestType,
    RequestUpdate,
    TimeOffRequest,
    User,
)
from services.repository import REQUESTS_KEY, RequestRepository
from services.visibility import can_edit

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _label(request_type: RequestType) -> str:
    return request_type.value.replace("_", " ")


class LifecycleStore:
    def __init__(
        self,
        repository: RequestRepository,
        storage,
        notifications,
        storage_key: str = "timeoff.requests",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._repository = repository
        self._storage = storage
        self._notifications = notifications
        self._storage_key = storage_key
        self._clock = clock
        self._requests: list[TimeOffRequest] = self._restore()

    @property
    def requests(self) -> list[TimeOffRequest]:
        return list(self._requests)

    # -- persistence

    def _restore(self) -> list[TimeOffRequest]:
        raw = self._storage.load(self._storage_key)
        if not raw:
            return []
        try:
            return [TimeOffRequest.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, PydanticValidationError) as e:
            logger.warning("Discarding unreadable persisted requests: %s", e)
            return []

    def _persist(self) -> None:
        payload = json.dumps([r.to_wire() for r in self._requests])
        self._storage.save(self._storage_key, payload)

    def _commit(self) -> None:
        self._persist()
        self._repository.invalidate([REQUESTS_KEY])

    async def _send(self, write):
        try:
            return await write
        except FetchError:
            # Nothing was applied locally; make the next read refetch.
            self._repository.invalidate([REQUESTS_KEY])
            raise

    # -- reads

    async def load(self, force: bool = False) -> list[TimeOffRequest]:
        """Pull the collection through the repository and persist it."""
        if force:
            data = await self._repository.force_refresh()
        else:
            data = await self._repository.fetch_requests()
        self._requests = list(data)
        self._persist()
        return self.requests

    async def get(self, request_id: str) -> TimeOffRequest:
        index = self._index_of(request_id)
        if index is not None:
            return self._requests[index]

        # Unknown locally: look it up remotely without replacing the collection
        try:
            data = await self._repository.fetch_requests()
        except FetchError as e:
            logger.warning("Lookup of %s could not reach the remote API: %s", request_id, e)
            raise NotFoundError(request_id) from e
        for remote in data:
            if remote.id == request_id:
                self._requests.append(remote)
                self._persist()
                return remote
        raise NotFoundError(request_id)

    def _index_of(self, request_id: str) -> int | None:
        for i, r in enumerate(self._requests):
            if r.id == request_id:
                return i
        return None

    def _replace(self, updated: TimeOffRequest) -> None:
        index = self._index_of(updated.id)
        if index is None:
            self._requests.append(updated)
        else:
            self._requests[index] = updated

    # -- mutations

    async def add_request(self, draft: RequestDraft, employee: User) -> TimeOffRequest:
        end_date = draft.start_date if draft.type == RequestType.TIME_EDIT else draft.end_date
        _validate_fields(
            draft.type,
            draft.start_date,
            end_date,
            draft.reason,
            draft.requested_clock_in,
            draft.requested_clock_out,
        )

        now = self._clock()
        request = TimeOffRequest(
            id=uuid.uuid4().hex,
            employee=employee,
            type=draft.type,
            start_date=draft.start_date,
            end_date=end_date,
            reason=draft.reason.strip(),
            status=RequestStatus.PENDING,
            original_clock_in=draft.original_clock_in,
            original_clock_out=draft.original_clock_out,
            requested_clock_in=draft.requested_clock_in,
            requested_clock_out=draft.requested_clock_out,
            created_at=now,
            updated_at=now,
        )

        remote_id = await self._send(self._repository.create_request(request))
        if remote_id and remote_id != request.id:
            # The remote owns ids; keep ours only when it assigns none
            request = request.model_copy(update={"id": remote_id})
        self._requests.append(request)
        self._commit()

        logger.info("Request %s (%s) submitted by %s", request.id, request.type.value, employee.id)
        self._notifications.add_notification(
            NotificationType.SUCCESS,
            f"Your {_label(request.type)} request has been submitted",
        )
        return request

    async def update_request_status(
        self,
        request_id: str,
        new_status: RequestStatus | str,
        actor: User,
        rejection_reason: str | None = None,
    ) -> TimeOffRequest:
        try:
            new_status = RequestStatus(new_status)
        except ValueError:
            raise ValidationError("status", f"Invalid status: {new_status}") from None
        if new_status == RequestStatus.PENDING:
            raise ValidationError("status", "Status can only be set to approved or rejected")

        request = await self.get(request_id)
        if not request.is_pending:
            raise InvalidTransitionError(request_id, request.status.value, new_status.value)
        if actor.id == request.employee.id:
            raise SelfApprovalError(request_id)
        if not actor.is_manager:
            raise ForbiddenError(f"Only managers and admins can {new_status.value[:-1]} requests")

        if new_status == RequestStatus.REJECTED:
            if rejection_reason is None:
                rejection_reason = DEFAULT_REJECTION_REASON
            elif not rejection_reason.strip():
                raise ValidationError("rejectionReason", "Rejection reason cannot be empty")
            rejection_reason = rejection_reason.strip()
        else:
            rejection_reason = None

        updated = request.model_copy(
            update={
                "status": new_status,
                "approved_by": actor,
                "rejection_reason": rejection_reason,
                "updated_at": self._clock(),
            }
        )

        await self._send(self._repository.update_request_status(updated))
        self._replace(updated)
        self._commit()

        logger.info("Request %s %s by %s", request_id, new_status.value, actor.id)
        if new_status == RequestStatus.APPROVED:
            self._notifications.add_notification(
                NotificationType.SUCCESS,
                f"{request.employee.name}'s {_label(request.type)} request has been approved",
            )
        else:
            self._notifications.add_notification(
                NotificationType.WARNING,
                f"{request.employee.name}'s {_label(request.type)} request has been rejected",
            )
        return updated

    async def update_request(
        self, request_id: str, changes: RequestUpdate, editor: User
    ) -> TimeOffRequest:
        """Edit reason, dates or clock times of a pending request."""
        request = await self.get(request_id)
        if not request.is_pending:
            raise InvalidTransitionError(request_id, request.status.value, "edited")
        if not can_edit(editor, request):
            raise ForbiddenError(f"Not allowed to edit request {request_id}")

        fields = changes.model_dump(exclude_unset=True)
        merged = request.model_copy(update=fields)
        if merged.type == RequestType.TIME_EDIT:
            merged = merged.model_copy(update={"end_date": merged.start_date})
        _validate_fields(
            merged.type,
            merged.start_date,
            merged.end_date,
            merged.reason,
            merged.requested_clock_in,
            merged.requested_clock_out,
        )
        updated = merged.model_copy(
            update={"reason": merged.reason.strip(), "updated_at": self._clock()}
        )

        await self._send(self._repository.update_request(updated))
        self._replace(updated)
        self._commit()

        logger.info("Request %s edited by %s", request_id, editor.id)
        self._notifications.add_notification(
            NotificationType.INFO,
            f"{_label(request.type).capitalize()} request updated",
        )
        return updated


def _validate_fields(
    request_type: RequestType,
    start_date: date | None,
    end_date: date | None,
    reason: str | None,
    requested_clock_in: str | None,
    requested_clock_out: str | None,
) -> None:
    if start_date is None:
        raise ValidationError("startDate")
    if request_type == RequestType.TIME_EDIT:
        if not requested_clock_in:
            raise ValidationError("requestedClockIn")
        if not requested_clock_out:
            raise ValidationError("requestedClockOut")
    else:
        if end_date is None:
            raise ValidationError("endDate")
        if end_date < start_date:
            raise ValidationError("endDate", "End date cannot be before start date")
    if not reason or not reason.strip():
        raise ValidationError("reason")
