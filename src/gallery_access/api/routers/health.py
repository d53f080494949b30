"""
gallery_access.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with SQL profile-store connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text

from gallery_access.auth.deps import get_services
from gallery_access.services.container import Services

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(services: Services = Depends(get_services)) -> dict[str, str]:
    # The profile store is optional for sign-in, so readiness only checks reachability.
    if services.engine is not None:
        async with services.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    return {"status": "ready"}
