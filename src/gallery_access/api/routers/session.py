"""
gallery_access.api.routers.session

Session endpoints.

Responsibilities:
- Exchange a provider ID token for the session cookie (rate limited).
- Report the current principal / cookie presence.
- Sign out (JSON) and log out (redirect to sign-in).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field
from starlette.status import HTTP_303_SEE_OTHER, HTTP_401_UNAUTHORIZED

from gallery_access.auth.cookies import CookieJar
from gallery_access.auth.deps import get_cookie_jar, get_services, rate_limited
from gallery_access.services.container import Services

router = APIRouter(prefix="/v1/session", tags=["session"])


class CreateSessionRequest(BaseModel):
    id_token: str = Field(min_length=1, max_length=8192)


@router.post("", dependencies=[Depends(rate_limited("auth"))])
async def create_session(
    body: CreateSessionRequest,
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> JSONResponse:
    result = await services.sessions.create_session(body.id_token, jar)
    if not result.success:
        return JSONResponse(
            status_code=HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": result.error},
        )
    return jar.apply(JSONResponse(content={"success": True}))


@router.get("/user")
async def current_user(
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> JSONResponse:
    principal = await services.sessions.get_principal(jar)
    user = principal.to_public_dict() if principal is not None else None
    return jar.apply(JSONResponse(content={"user": user}))


@router.get("/status")
async def session_status(
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> dict[str, bool]:
    # Cookie presence only; not proof of a valid session.
    return {"active": services.sessions.has_session(jar)}


@router.post("/sign-out")
async def sign_out(
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> JSONResponse:
    result = services.sessions.sign_out(jar)
    return jar.apply(JSONResponse(content={"success": result.success}))


@router.post("/logout")
async def logout(
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> RedirectResponse:
    redirect = services.sessions.destroy_session(jar)
    return jar.apply(RedirectResponse(url=redirect.target, status_code=HTTP_303_SEE_OTHER))
