"""FastAPI application entry point for the time-off request service.

`create_app` is the composition root: it builds the one cache, repository,
notification center and lifecycle store for the session and hangs them on
`app.state`. Routes reach them through `routes.deps`.
"""

import logging
import sys

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.notifications import NotificationCenter
from services.remote_api import RemoteTimeOffAPI
from services.repository import RequestRepository
from services.storage import FileStorage, MemoryStorage
from services.store import LifecycleStore

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(settings: Settings = default_settings, source=None, storage=None) -> FastAPI:
    app = FastAPI(title="Time-Off Request API", version="1.0.0")

    if source is None:
        source = RemoteTimeOffAPI(
            base_url=settings.api_base_url or "",
            token=settings.api_token,
            timeout=settings.api_timeout,
        )
    if storage is None:
        storage = FileStorage(settings.storage_dir) if settings.storage_dir else MemoryStorage()

    cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)
    repository = RequestRepository(source, cache)
    notifications = NotificationCenter()
    app.state.repository = repository
    app.state.notifications = notifications
    app.state.store = LifecycleStore(
        repository,
        storage,
        notifications,
        storage_key=settings.storage_key,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.cache import router as cache_router
    from routes.health import router as health_router
    from routes.notifications import router as notifications_router
    from routes.requests import router as requests_router

    app.include_router(health_router)
    app.include_router(requests_router)
    app.include_router(notifications_router)
    app.include_router(cache_router)

    @app.on_event("startup")
    async def _validate_config() -> None:
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars (remote API calls will fail): %s", ", ".join(missing))

    @app.on_event("shutdown")
    async def _close_source() -> None:
        if isinstance(source, RemoteTimeOffAPI):
            await source.aclose()

    return app


app = create_app()
