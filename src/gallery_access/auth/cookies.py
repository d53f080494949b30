"""
gallery_access.auth.cookies

Per-request view of the session cookie.

Responsibilities:
- Hold the incoming session artifact (if any).
- Record set/delete operations and apply them to an outgoing response.
"""

from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import Request
from starlette.responses import Response

from gallery_access.settings import Settings


@dataclass(frozen=True, slots=True)
class SessionCookiePolicy:
    name: str
    max_age: int
    secure: bool
    path: str = "/"
    samesite: str = "lax"
    httponly: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionCookiePolicy:
        return cls(
            name=settings.session_cookie_name,
            max_age=settings.session_duration_ms // 1000,
            secure=settings.session_cookie_secure,
        )


class CookieJar:
    """
    Mutable, request-scoped cookie state.

    Deleting is idempotent: a jar whose cookie is already absent still emits
    an expiring Set-Cookie so stale browser state is cleared.
    """

    def __init__(self, policy: SessionCookiePolicy, incoming: str | None = None) -> None:
        self.policy = policy
        self._value = incoming or None
        self._pending: tuple[str, str | None] | None = None

    @classmethod
    def from_request(cls, request: Request, policy: SessionCookiePolicy) -> CookieJar:
        return cls(policy, request.cookies.get(policy.name))

    def get(self) -> str | None:
        return self._value

    def has(self) -> bool:
        return self._value is not None

    def set(self, value: str) -> None:
        self._value = value
        self._pending = ("set", value)

    def delete(self) -> None:
        self._value = None
        self._pending = ("delete", None)

    @property
    def deleted(self) -> bool:
        return self._pending is not None and self._pending[0] == "delete"

    @property
    def issued(self) -> str | None:
        if self._pending is not None and self._pending[0] == "set":
            return self._pending[1]
        return None

    def apply(self, response: Response) -> Response:
        if self._pending is None:
            return response
        op, value = self._pending
        p = self.policy
        if op == "set":
            response.set_cookie(
                key=p.name,
                value=value or "",
                max_age=p.max_age,
                path=p.path,
                secure=p.secure,
                httponly=p.httponly,
                samesite=p.samesite,
            )
        else:
            response.delete_cookie(
                key=p.name,
                path=p.path,
                secure=p.secure,
                httponly=p.httponly,
                samesite=p.samesite,
            )
        return response
