"""
gallery_access.auth.deps

FastAPI dependency functions for sessions and throttling.

Responsibilities:
- Expose the composed `Services` from app.state.
- Build the per-request `CookieJar`.
- Enforce per-action rate limits via a reusable dependency factory.
"""

from __future__ import annotations

import math

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from gallery_access.auth.cookies import CookieJar
from gallery_access.ratelimit.limiter import RateLimitResult, client_fingerprint
from gallery_access.services.container import Services

TOO_MANY_REQUESTS_MESSAGE = "Too many requests. Please try again later."


def get_services(request: Request) -> Services:
    # Built by `gallery_access.api.app.create_app`.
    return request.app.state.services  # type: ignore[attr-defined]


def get_cookie_jar(request: Request, services: Services = Depends(get_services)) -> CookieJar:
    return CookieJar.from_request(request, services.cookie_policy)


def rate_limited(action: str):
    def _dep(request: Request, services: Services = Depends(get_services)) -> RateLimitResult:
        client_id = client_fingerprint(request.headers)
        result = services.limiter.check(action, client_id)
        if not result.allowed:
            status = services.limiter.status(action, client_id)
            raise HTTPException(
                status_code=HTTP_429_TOO_MANY_REQUESTS,
                detail=TOO_MANY_REQUESTS_MESSAGE,
                headers={"Retry-After": str(max(1, math.ceil(status.reset_in_ms / 1000)))},
            )
        return result

    return _dep


# --- Module Notes -----------------------------------------------------------
# Authorization stays out of dependencies: privileged routes call
# `SessionManager.require_admin` right before acting and apply cookie clears to
# the response they return.
