"""
gallery_access.api.routers.admin

Admin-only operations.

Responsibilities:
- Re-check the access policy immediately before every privileged action.
- Deny with a generic 403 before looking at the target resource.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from starlette.status import HTTP_403_FORBIDDEN, HTTP_502_BAD_GATEWAY

from gallery_access.auth.cookies import CookieJar
from gallery_access.auth.deps import get_cookie_jar, get_services, rate_limited
from gallery_access.auth.errors import ProviderError
from gallery_access.auth.policy import AuthorizationDenied
from gallery_access.observability.logging import get_logger
from gallery_access.services.container import Services

router = APIRouter(prefix="/v1/admin", tags=["admin"])

log = get_logger(__name__)


@router.post(
    "/users/{subject_id}/revoke-sessions",
    dependencies=[Depends(rate_limited("api"))],
)
async def revoke_user_sessions(
    subject_id: str = Path(min_length=1, max_length=128),
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> JSONResponse:
    outcome = await services.sessions.require_admin(jar)
    if isinstance(outcome, AuthorizationDenied):
        return jar.apply(
            JSONResponse(status_code=HTTP_403_FORBIDDEN, content={"error": outcome.message})
        )

    try:
        await services.sessions.revoke_sessions(subject_id)
    except ProviderError as e:
        log.error("admin_revoke_failed", code=e.code, actor=outcome.subject_id)
        return JSONResponse(
            status_code=HTTP_502_BAD_GATEWAY,
            content={"success": False, "error": "Failed to revoke sessions."},
        )

    log.info("admin_revoked_sessions", actor=outcome.subject_id, subject_id=subject_id)
    return jar.apply(JSONResponse(content={"success": True}))


# --- Module Notes -----------------------------------------------------------
# User listing, stats and media moderation are rendered by the gallery app;
# this router only carries identity-side admin actions.
