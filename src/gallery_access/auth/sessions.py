"""
gallery_access.auth.sessions

Session lifecycle: issue, verify, revoke.

Responsibilities:
- Exchange a short-lived provider bearer token for a long-lived session
  artifact carried in an HttpOnly cookie.
- Resolve the current `Principal` from the cookie, verifying with revocation
  checks and clearing the cookie on any failure.
- Classify verification failures: expected ones are silent, unexpected ones
  are logged. Neither is ever raised to the caller.
- Record a principal profile on sign-in without letting the profile store
  decide whether sign-in succeeds.

Per-request states:
    no cookie            -> None (provider not contacted)
    cookie, verified     -> Principal
    cookie, failed       -> cookie deleted -> None (logged only if unexpected)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog

from gallery_access.auth.cookies import CookieJar
from gallery_access.auth.errors import (
    PROVIDER_TIMEOUT,
    ProviderError,
    UnexpectedSessionError,
    classify_session_error,
)
from gallery_access.auth.models import ActionResult, Principal, Redirect
from gallery_access.auth.policy import AccessPolicy, AuthorizationDenied
from gallery_access.auth.provider import Claims, IdentityProvider, subject_of
from gallery_access.observability.logging import get_logger
from gallery_access.profiles.store import ProfileStore, ProfileStoreNotFound

AUTH_FAILED_MESSAGE = "Authentication failed. Please try again."

T = TypeVar("T")


class SessionManager:
    def __init__(
        self,
        *,
        provider: IdentityProvider,
        policy: AccessPolicy,
        profiles: ProfileStore | None,
        duration_ms: int,
        sign_in_path: str = "/login",
        provider_timeout: float = 10.0,
        profile_store_missing: str = "warn_once",
        profile_sync_blocking: bool = True,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._provider = provider
        self._policy = policy
        self._profiles = profiles
        self._duration_ms = duration_ms
        self._sign_in_path = sign_in_path
        self._timeout = provider_timeout
        self._missing_mode = profile_store_missing
        self._missing_warned = False
        self._sync_blocking = profile_sync_blocking
        self._background: set[asyncio.Task[None]] = set()
        self._log = log or get_logger(__name__)

    @property
    def duration_ms(self) -> int:
        return self._duration_ms

    @property
    def timeout(self) -> float:
        return self._timeout

    async def create_session(self, bearer_token: str, cookies: CookieJar) -> ActionResult:
        try:
            claims = await self._call(self._provider.verify_bearer_token(bearer_token))
            artifact = await self._call(
                self._provider.create_session_artifact(bearer_token, self._duration_ms)
            )
        except ProviderError as e:
            # Provider detail stays in the log; the caller gets a generic message.
            self._log.warning("session_creation_failed", code=e.code)
            return ActionResult.failed(AUTH_FAILED_MESSAGE)

        cookies.set(artifact)

        if self._profiles is not None:
            if self._sync_blocking:
                await self._sync_profile(claims)
            else:
                task = asyncio.create_task(self._sync_profile(claims))
                self._background.add(task)
                task.add_done_callback(self._background.discard)
        return ActionResult.ok()

    async def get_principal(self, cookies: CookieJar) -> Principal | None:
        artifact = cookies.get()
        if not artifact:
            return None

        try:
            claims = await self._call(
                self._provider.verify_session_artifact(artifact, check_revocation=True)
            )
        except ProviderError as e:
            cookies.delete()
            failure = classify_session_error(e)
            if isinstance(failure, UnexpectedSessionError):
                self._log.error(
                    "session_verification_failed", code=failure.code, message=failure.message
                )
            return None

        email = claims.get("email")
        return Principal(
            subject_id=subject_of(claims),
            email=email,
            display_name=claims.get("name"),
            picture_url=claims.get("picture"),
            is_admin=self._policy.allows(email),
        )

    def destroy_session(self, cookies: CookieJar) -> Redirect:
        cookies.delete()
        return Redirect(target=self._sign_in_path)

    def sign_out(self, cookies: CookieJar) -> ActionResult:
        cookies.delete()
        return ActionResult.ok()

    def has_session(self, cookies: CookieJar) -> bool:
        return cookies.has()

    async def is_admin(self, cookies: CookieJar) -> bool:
        principal = await self.get_principal(cookies)
        return principal is not None and self._policy.allows(principal.email)

    async def require_admin(self, cookies: CookieJar) -> Principal | AuthorizationDenied:
        principal = await self.get_principal(cookies)
        # Re-evaluate the policy on the verified email; the stamped flag is not trusted.
        if principal is None or not self._policy.allows(principal.email):
            return AuthorizationDenied()
        return principal

    async def revoke_sessions(self, subject_id: str) -> None:
        await self._call(self._provider.revoke_all_sessions_for(subject_id))

    async def delete_subject(self, subject_id: str) -> None:
        await self._call(self._provider.delete_subject(subject_id))

    async def drain(self) -> None:
        """Wait for background profile writes (shutdown and tests)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def _call(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TimeoutError as e:
            raise ProviderError(
                PROVIDER_TIMEOUT, f"Identity provider did not answer within {self._timeout}s"
            ) from e

    async def _sync_profile(self, claims: Claims) -> None:
        subject_id = subject_of(claims)
        now = datetime.now(tz=UTC)
        try:
            await asyncio.wait_for(
                self._write_profile(subject_id, claims, now), timeout=self._timeout
            )
        except ProfileStoreNotFound:
            self._note_missing_store()
        except Exception as e:  # sign-in validity must not depend on the profile store
            self._log.error("profile_sync_failed", subject_id=subject_id, error=repr(e))

    async def _write_profile(self, subject_id: str, claims: Claims, now: datetime) -> None:
        existing = await self._profiles.get(subject_id)
        if existing is None:
            await self._profiles.set(subject_id, _new_profile(claims, now))
        else:
            await self._profiles.update(subject_id, {"updatedAt": now})

    def _note_missing_store(self) -> None:
        if self._missing_mode == "silent" or self._missing_warned:
            return
        self._missing_warned = True
        self._log.warning(
            "profile_store_missing",
            hint="Principal authenticated but profile not stored; provision the profile store.",
        )


def _new_profile(claims: Claims, now: datetime) -> dict[str, Any]:
    return {
        "uid": subject_of(claims),
        "email": claims.get("email") or "",
        "displayName": claims.get("name"),
        "photoURL": claims.get("picture"),
        "isBanned": False,
        "createdAt": now,
        "updatedAt": now,
    }


# --- Module Notes -----------------------------------------------------------
# No lock is held across provider calls, and there are no retries: a failed
# verification is final for the request that observed it.
