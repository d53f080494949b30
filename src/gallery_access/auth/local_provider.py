"""
gallery_access.auth.local_provider

In-process identity provider for local development and tests.

Responsibilities:
- Mint bearer tokens for arbitrary subjects (dev token endpoint).
- Exchange bearer tokens for session artifacts and verify them.
- Emulate provider-side state: revocation, disabled and deleted subjects,
  reported with the same error codes the Firebase adapter uses.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import Any

from gallery_access.auth.errors import ProviderError
from gallery_access.auth.jwt import (
    JwtConfig,
    JwtExpiredError,
    JwtValidationError,
    decode_and_validate,
    issue_token,
)
from gallery_access.auth.provider import Claims

ID_TOKEN_USE = "id"
SESSION_USE = "session"
_PROFILE_CLAIMS = ("email", "name", "picture")


class LocalIdentityProvider:
    def __init__(
        self,
        *,
        secret: str,
        issuer: str = "gallery-access-local",
        audience: str = "gallery-access",
        bearer_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._cfg = JwtConfig(alg="HS256", issuer=issuer, audience=audience, secret=secret)
        self._bearer_ttl = bearer_ttl
        self._lock = threading.Lock()
        # Revocation generation per subject; artifacts carry the generation they were issued under.
        self._generations: dict[str, int] = {}
        self._disabled: set[str] = set()
        self._deleted: set[str] = set()

    def mint_bearer_token(
        self,
        subject_id: str,
        *,
        email: str | None = None,
        name: str | None = None,
        picture: str | None = None,
        ttl: timedelta | None = None,
    ) -> str:
        with self._lock:
            self._deleted.discard(subject_id)
        claims = {k: v for k, v in (("email", email), ("name", name), ("picture", picture)) if v}
        return issue_token(
            cfg=self._cfg,
            subject=subject_id,
            token_use=ID_TOKEN_USE,
            ttl=ttl or self._bearer_ttl,
            claims=claims,
        )

    def set_disabled(self, subject_id: str, disabled: bool = True) -> None:
        with self._lock:
            if disabled:
                self._disabled.add(subject_id)
            else:
                self._disabled.discard(subject_id)

    async def verify_bearer_token(self, token: str) -> Claims:
        try:
            payload = decode_and_validate(cfg=self._cfg, token=token, token_use=ID_TOKEN_USE)
        except JwtExpiredError as e:
            raise ProviderError("auth/id-token-expired", str(e)) from e
        except JwtValidationError as e:
            raise ProviderError("auth/argument-error", str(e)) from e
        self._check_subject(payload["sub"])
        return _claims(payload)

    async def create_session_artifact(self, token: str, duration_ms: int) -> str:
        claims = await self.verify_bearer_token(token)
        subject = claims["uid"]
        with self._lock:
            generation = self._generations.get(subject, 0)
        profile = {k: claims[k] for k in _PROFILE_CLAIMS if claims.get(k)}
        return issue_token(
            cfg=self._cfg,
            subject=subject,
            token_use=SESSION_USE,
            ttl=timedelta(milliseconds=duration_ms),
            claims={**profile, "gen": generation},
        )

    async def verify_session_artifact(self, artifact: str, *, check_revocation: bool) -> Claims:
        try:
            payload = decode_and_validate(cfg=self._cfg, token=artifact, token_use=SESSION_USE)
        except JwtExpiredError as e:
            raise ProviderError("auth/session-cookie-expired", str(e)) from e
        except JwtValidationError as e:
            raise ProviderError("auth/argument-error", str(e)) from e

        if check_revocation:
            subject = payload["sub"]
            self._check_subject(subject)
            with self._lock:
                current = self._generations.get(subject, 0)
            if int(payload.get("gen", 0)) < current:
                raise ProviderError("auth/session-cookie-revoked", "The session has been revoked.")
        return _claims(payload)

    async def revoke_all_sessions_for(self, subject_id: str) -> None:
        with self._lock:
            self._generations[subject_id] = self._generations.get(subject_id, 0) + 1

    async def delete_subject(self, subject_id: str) -> None:
        with self._lock:
            self._deleted.add(subject_id)
            self._generations[subject_id] = self._generations.get(subject_id, 0) + 1

    def _check_subject(self, subject_id: str) -> None:
        with self._lock:
            deleted = subject_id in self._deleted
            disabled = subject_id in self._disabled
        if deleted:
            raise ProviderError("auth/user-not-found", "No user record for the subject.")
        if disabled:
            raise ProviderError("auth/user-disabled", "The user account has been disabled.")


def _claims(payload: dict[str, Any]) -> Claims:
    claims: Claims = {"uid": payload["sub"]}
    for key in _PROFILE_CLAIMS:
        if payload.get(key):
            claims[key] = payload[key]
    return claims


# --- Module Notes -----------------------------------------------------------
# State lives in this instance only; restarting the process forgets revocations.
# That is acceptable for dev/test and the reason `create_app` refuses it in prod.
