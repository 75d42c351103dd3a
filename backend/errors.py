"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TimeOffError(Exception):
    """Base exception with HTTP status code."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(TimeOffError):
    """Missing or invalid input to a mutation. `field` names the culprit."""

    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"Missing required field: {field}")
        self.field = field


class ForbiddenError(TimeOffError):
    status_code = 403


class SelfApprovalError(TimeOffError):
    status_code = 403

    def __init__(self, request_id: str):
        super().__init__(f"Request {request_id} cannot be approved or rejected by its owner")
        self.request_id = request_id


class NotFoundError(TimeOffError):
    status_code = 404

    def __init__(self, request_id: str):
        super().__init__(f"Request not found: {request_id}")
        self.request_id = request_id


class InvalidTransitionError(TimeOffError):
    status_code = 409

    def __init__(self, request_id: str, current: str, target: str):
        super().__init__(
            f"Request {request_id} is {current}; only pending requests can be {target}"
        )
        self.request_id = request_id
        self.current = current
        self.target = target


class FetchError(TimeOffError):
    """Remote call failed and no usable cached data was available."""

    status_code = 502


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(TimeOffError)
    async def handle_timeoff_error(_request: Request, exc: TimeOffError):
        return JSONResponse(
            {"error": str(exc), "kind": type(exc).__name__},
            status_code=exc.status_code,
        )

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
