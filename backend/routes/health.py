"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Depends

from config import settings
from errors import FetchError
from routes.deps import get_repository
from services.repository import REQUESTS_KEY, RequestRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "timeoff-api", "commit": settings.git_sha}


@router.get("/health")
async def health(repository: RequestRepository = Depends(get_repository)) -> dict:
    """Deep health check that verifies the remote API answers."""
    result = {"status": "ok", "service": "timeoff-api", "commit": settings.git_sha, "remote": "not_tested"}

    try:
        requests = await repository.fetch_requests()
        entry = repository.cache.get(REQUESTS_KEY)
        result["remote"] = "connected" if entry is not None and entry.is_fresh else "degraded"
        result["cached_requests"] = len(requests)
    except FetchError as e:
        logger.exception("Remote API health check failed")
        result["remote"] = "error"
        result["remote_error"] = str(e)

    return result
