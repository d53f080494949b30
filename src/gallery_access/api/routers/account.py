from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_502_BAD_GATEWAY

from gallery_access.auth.cookies import CookieJar
from gallery_access.auth.deps import get_cookie_jar, get_services, rate_limited
from gallery_access.services.account_service import AccountService
from gallery_access.services.container import Services

router = APIRouter(prefix="/v1/account", tags=["account"])


@router.delete("", dependencies=[Depends(rate_limited("delete"))])
async def delete_account(
    jar: CookieJar = Depends(get_cookie_jar),
    services: Services = Depends(get_services),
) -> JSONResponse:
    principal = await services.sessions.get_principal(jar)
    if principal is None:
        return jar.apply(
            JSONResponse(
                status_code=HTTP_401_UNAUTHORIZED,
                content={"success": False, "error": "Not authenticated"},
            )
        )

    svc = AccountService(sessions=services.sessions, profiles=services.profiles)
    result = await svc.delete_account(principal, jar)
    if not result.success:
        return JSONResponse(
            status_code=HTTP_502_BAD_GATEWAY, content={"success": False, "error": result.error}
        )
    return jar.apply(JSONResponse(content={"success": True}))
