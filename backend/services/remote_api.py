"""HTTP client for the remote time-off API.

Thin async wrapper over httpx. Returns raw JSON (dicts/lists); parsing into
models is the repository's job. Every transport or HTTP status failure is
raised as FetchError.
"""

import logging

import httpx

from errors import FetchError

logger = logging.getLogger(__name__)


class RemoteTimeOffAPI:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, json: dict | None = None):
        try:
            resp = await self._client.request(method, path, json=json)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.warning("%s %s failed with %s: %s", method, path, e.response.status_code, message)
            raise FetchError(message) from e
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise FetchError("Cannot connect to server. Please check your connection.") from e

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise FetchError(f"Malformed response from {method} {path}") from e

    async def get_requests(self) -> list[dict]:
        return await self._request("GET", "/requests")

    async def create_request(self, payload: dict) -> dict | None:
        return await self._request("POST", "/requests", json=payload)

    async def update_request(self, request_id: str, payload: dict) -> dict | None:
        return await self._request("PUT", f"/requests/{request_id}", json=payload)

    async def update_request_status(
        self, request_id: str, status: str, rejection_reason: str | None = None
    ) -> dict | None:
        return await self._request(
            "PATCH",
            f"/requests/{request_id}/status",
            json={"status": status, "rejectionReason": rejection_reason},
        )

    async def get_notifications(self) -> list[dict]:
        return await self._request("GET", "/notifications")

    async def mark_notification_read(self, notification_id: str) -> dict | None:
        return await self._request("PATCH", f"/notifications/{notification_id}/read")

    async def mark_all_notifications_read(self) -> dict | None:
        return await self._request("PATCH", "/notifications/read-all")

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Prefer the server's {"message": ...} body over a bare status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP error! status: {response.status_code}"
