"""
gallery_access.auth.jwt

JWT issuing and validation helpers for the local identity provider.

Responsibilities:
- Issue HS256 tokens for local/dev scenarios (bearer tokens and session artifacts).
- Decode and validate with strict claim requirements (iss/aud/exp/iat/sub/use).

Note:
- Production uses the Firebase provider, which verifies provider-signed tokens;
  nothing here is involved in that path.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str


class JwtValidationError(Exception):
    pass


class JwtExpiredError(JwtValidationError):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    token_use: str,
    ttl: timedelta,
    claims: dict[str, Any] | None = None,
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "iss": cfg.issuer,
            "aud": cfg.audience,
            "sub": subject,
            "use": token_use,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
    )
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str, token_use: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": ["exp", "iat", "iss", "aud", "sub"]},
        )
    except ExpiredSignatureError as e:
        raise JwtExpiredError(str(e)) from e
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    # A bearer token must not be accepted as a session artifact and vice versa.
    if payload.get("use") != token_use:
        raise JwtValidationError(f"Token is not a {token_use} token")
    return payload


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by:
# - `auth.local_provider` (bearer tokens and session artifacts)
# - `api/routers/dev_auth.py` (dev convenience, via the local provider)
