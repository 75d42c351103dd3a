"""Cached access to the remote request and notification collections.

Reads are served from the TTL cache while fresh. On a miss or a stale entry
the remote API is called; if that fails, a stale entry is returned as a
degraded result rather than no data at all.
"""

import logging
from typing import Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from errors import FetchError
from models import Notification, TimeOffRequest
from services.cache import TTLCache

logger = logging.getLogger(__name__)

REQUESTS_KEY = "requests"
NOTIFICATIONS_KEY = "notifications"


class RequestRepository:
    def __init__(self, source, cache: TTLCache):
        self.source = source
        self.cache = cache

    async def _cached_fetch(self, key: str, fetch: Callable[[], Awaitable[list]], parse):
        entry = self.cache.get(key)
        if entry is not None and entry.is_fresh:
            logger.debug("Using cached %s (age %.1fs)", key, entry.age_seconds)
            return entry.data

        try:
            logger.info("Fetching fresh %s from remote API", key)
            raw = await fetch()
            data = _parse_all(raw, parse, key)
        except FetchError as e:
            if entry is not None:
                logger.warning(
                    "Remote fetch of %s failed (%s); serving stale data (age %.1fs)",
                    key, e, entry.age_seconds,
                )
                return entry.data
            raise

        self.cache.set(key, data)
        return data

    async def fetch_requests(self) -> list[TimeOffRequest]:
        return await self._cached_fetch(
            REQUESTS_KEY, self.source.get_requests, TimeOffRequest.model_validate
        )

    async def fetch_notifications(self) -> list[Notification]:
        return await self._cached_fetch(
            NOTIFICATIONS_KEY, self.source.get_notifications, Notification.model_validate
        )

    async def force_refresh(self) -> list[TimeOffRequest]:
        logger.info("Force refreshing requests")
        self.invalidate([REQUESTS_KEY])
        return await self.fetch_requests()

    def invalidate(self, keys: list[str] | None = None) -> None:
        self.cache.invalidate(keys)
        logger.debug("Invalidated cache keys: %s", keys if keys is not None else "all")

    def cache_info(self) -> dict[str, dict]:
        return self.cache.info()

    # -- writes. Request writes are forwarded as-is; the store invalidates
    # "requests" once its own copy is persisted.

    async def create_request(self, request: TimeOffRequest) -> str | None:
        """Send a new request; returns the id the remote assigned, if it sent one."""
        response = await self.source.create_request(request.to_wire())
        if isinstance(response, dict) and response.get("id"):
            return str(response["id"])
        return None

    async def update_request(self, request: TimeOffRequest) -> None:
        await self.source.update_request(request.id, request.to_wire())

    async def update_request_status(self, request: TimeOffRequest) -> None:
        await self.source.update_request_status(
            request.id, request.status.value, request.rejection_reason
        )

    async def mark_notification_read(self, notification_id: str) -> None:
        await self.source.mark_notification_read(notification_id)
        self.invalidate([NOTIFICATIONS_KEY])

    async def mark_all_notifications_read(self) -> None:
        await self.source.mark_all_notifications_read()
        self.invalidate([NOTIFICATIONS_KEY])


def _parse_all(raw, parse, key: str) -> list:
    """Parse wire records; a malformed payload counts as a failed fetch."""
    if not isinstance(raw, list):
        raise FetchError(f"Expected a list of {key}, got {type(raw).__name__}")
    try:
        return [parse(item) for item in raw]
    except PydanticValidationError as e:
        raise FetchError(f"Malformed {key} payload: {e.error_count()} invalid field(s)") from e
