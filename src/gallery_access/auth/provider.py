"""
gallery_access.auth.provider

Identity provider boundary.

Responsibilities:
- Declare the capability set the session layer needs from a provider.
- Keep provider SDK types out of the session layer: implementations return
  plain claim dicts and raise only `ProviderError`.
"""

from __future__ import annotations

from typing import Any, Protocol

Claims = dict[str, Any]


class IdentityProvider(Protocol):
    async def verify_bearer_token(self, token: str) -> Claims: ...

    async def create_session_artifact(self, token: str, duration_ms: int) -> str: ...

    async def verify_session_artifact(self, artifact: str, *, check_revocation: bool) -> Claims: ...

    async def revoke_all_sessions_for(self, subject_id: str) -> None: ...

    async def delete_subject(self, subject_id: str) -> None: ...


def subject_of(claims: Claims) -> str:
    # Firebase decodes `uid`; plain JWTs carry `sub`.
    return str(claims.get("uid") or claims.get("sub") or "")


# --- Module Notes -----------------------------------------------------------
# Implementations: `auth.firebase_provider` (production) and
# `auth.local_provider` (dev/test, PyJWT-signed artifacts).
