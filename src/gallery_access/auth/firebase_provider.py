"""
gallery_access.auth.firebase_provider

Firebase Authentication adapter.

Responsibilities:
- Initialize a named firebase_admin App from a normalized service account.
- Expose the `IdentityProvider` capability set over the (blocking) Admin SDK.
- Translate SDK exceptions into `ProviderError` codes.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError

from gallery_access.auth.credentials import ServiceAccountCredential
from gallery_access.auth.errors import UNKNOWN_PROVIDER_ERROR, ConfigurationError, ProviderError
from gallery_access.auth.provider import Claims

# Order matters: several of these subclass the Invalid* errors listed last.
_ERROR_CODES: tuple[tuple[type[BaseException], str], ...] = (
    (firebase_auth.ExpiredSessionCookieError, "auth/session-cookie-expired"),
    (firebase_auth.RevokedSessionCookieError, "auth/session-cookie-revoked"),
    (firebase_auth.ExpiredIdTokenError, "auth/id-token-expired"),
    (firebase_auth.RevokedIdTokenError, "auth/id-token-revoked"),
    (firebase_auth.UserDisabledError, "auth/user-disabled"),
    (firebase_auth.UserNotFoundError, "auth/user-not-found"),
    (firebase_auth.InvalidSessionCookieError, "auth/argument-error"),
    (firebase_auth.InvalidIdTokenError, "auth/argument-error"),
    (ValueError, "auth/argument-error"),
)


def initialize_firebase_app(credential: ServiceAccountCredential, *, name: str) -> firebase_admin.App:
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass
    try:
        cert = credentials.Certificate(credential.to_certificate_info())
    except ValueError as e:
        # google-auth rejects keys it cannot parse even after PEM normalization.
        raise ConfigurationError(f"Service account rejected by firebase_admin: {e}") from e
    return firebase_admin.initialize_app(cert, {"projectId": credential.project_id}, name=name)


def to_provider_error(exc: BaseException) -> ProviderError:
    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return ProviderError(code, str(exc))
    if isinstance(exc, FirebaseError):
        return ProviderError(f"firebase/{str(exc.code).lower()}", str(exc))
    return ProviderError(UNKNOWN_PROVIDER_ERROR, str(exc))


class FirebaseIdentityProvider:
    def __init__(self, app: firebase_admin.App) -> None:
        self._app = app

    async def verify_bearer_token(self, token: str) -> Claims:
        return await self._run(firebase_auth.verify_id_token, token, app=self._app)

    async def create_session_artifact(self, token: str, duration_ms: int) -> str:
        return await self._run(
            firebase_auth.create_session_cookie,
            token,
            expires_in=timedelta(milliseconds=duration_ms),
            app=self._app,
        )

    async def verify_session_artifact(self, artifact: str, *, check_revocation: bool) -> Claims:
        return await self._run(
            firebase_auth.verify_session_cookie,
            artifact,
            check_revoked=check_revocation,
            app=self._app,
        )

    async def revoke_all_sessions_for(self, subject_id: str) -> None:
        await self._run(firebase_auth.revoke_refresh_tokens, subject_id, app=self._app)

    async def delete_subject(self, subject_id: str) -> None:
        await self._run(firebase_auth.delete_user, subject_id, app=self._app)

    @staticmethod
    async def _run(fn, *args, **kwargs):
        # The Admin SDK is blocking; keep it off the event loop.
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except Exception as e:  # SDK raises a wide hierarchy; normalize at this boundary.
            raise to_provider_error(e) from e


# --- Module Notes -----------------------------------------------------------
# Timeouts are applied by the caller (`auth.sessions.SessionManager`), so every
# provider implementation gets the same bound without duplicating it here.
