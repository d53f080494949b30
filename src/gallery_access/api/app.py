"""
gallery_access.api.app

FastAPI app factory for the session & access-control service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Compose the stateful services once (composition root) and stash them on
  app.state; a ConfigurationError raised here prevents the app from serving.
- Dispose shared infrastructure on shutdown.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gallery_access.api.routers.account import router as account_router
from gallery_access.api.routers.admin import router as admin_router
from gallery_access.api.routers.dev_auth import router as dev_auth_router
from gallery_access.api.routers.health import router as health_router
from gallery_access.api.routers.session import router as session_router
from gallery_access.db.init_db import init_db
from gallery_access.observability.logging import configure_logging, get_logger
from gallery_access.observability.middleware import RequestContextMiddleware
from gallery_access.services.container import Services, build_services
from gallery_access.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, services: Services | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    # Eager: bad credentials must fail here, not on the first request.
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log.info(
            "startup",
            env=settings.env,
            identity_provider=settings.identity_provider,
            profile_store=settings.profile_store,
        )
        if services.engine is not None and settings.env in ("dev", "test"):
            # Prod provisions the profile table through Alembic.
            await init_db(services.engine)
        try:
            yield
        finally:
            await services.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="Gallery Access",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.env != "prod" else None,
        openapi_url="/openapi.json" if settings.env != "prod" else None,
    )
    app.state.services = services

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(session_router)
    app.include_router(account_router)
    app.include_router(admin_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Rate-limit state lives in `services.limiter` and is therefore per process;
# running several workers multiplies the effective limits.
