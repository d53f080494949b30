"""
gallery_access.services.account_service

Account deletion.

Responsibilities:
- Invalidate every session of the principal at the provider.
- Remove the stored profile and the provider subject.
- Sign the caller out (cookie cleared, no redirect) so the API layer can
  report the outcome.
"""

from __future__ import annotations

import asyncio

from gallery_access.auth.cookies import CookieJar
from gallery_access.auth.errors import ProviderError
from gallery_access.auth.models import ActionResult, Principal
from gallery_access.auth.sessions import SessionManager
from gallery_access.observability.logging import get_logger
from gallery_access.profiles.store import ProfileStore, ProfileStoreNotFound

log = get_logger(__name__)

DELETE_FAILED_MESSAGE = "Failed to delete account. Please try again."


class AccountService:
    def __init__(
        self,
        *,
        sessions: SessionManager,
        profiles: ProfileStore,
    ) -> None:
        self._sessions = sessions
        self._profiles = profiles

    async def delete_account(self, principal: Principal, cookies: CookieJar) -> ActionResult:
        subject_id = principal.subject_id
        try:
            await self._sessions.revoke_sessions(subject_id)
            await self._delete_profile(subject_id)
            await self._sessions.delete_subject(subject_id)
        except ProviderError as e:
            log.error("account_deletion_failed", subject_id=subject_id, code=e.code)
            return ActionResult.failed(DELETE_FAILED_MESSAGE)
        except Exception as e:  # profile store failures
            log.error("account_deletion_failed", subject_id=subject_id, error=repr(e))
            return ActionResult.failed(DELETE_FAILED_MESSAGE)

        log.info("account_deleted", subject_id=subject_id)
        return self._sessions.sign_out(cookies)

    async def _delete_profile(self, subject_id: str) -> None:
        try:
            await asyncio.wait_for(
                self._profiles.delete(subject_id), timeout=self._sessions.timeout
            )
        except ProfileStoreNotFound:
            pass  # nothing was ever stored


# --- Module Notes -----------------------------------------------------------
# Media cleanup (images, avatars) belongs to the gallery services and runs
# before this call; this service only owns identity-side state.
