"""
gallery_access.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (service account key, local signing secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gallery_access.ratelimit.limiter import RateLimitConfig, default_rate_limits

MS_PER_DAY = 86_400_000


class Settings(BaseSettings):
    """
    Env-driven configuration for the session subsystem.

    Firebase credential fields read the conventional `FIREBASE_*` variable
    names directly (no `GALLERY_` prefix) so deployment manifests stay portable.
    """

    model_config = SettingsConfigDict(
        env_prefix="GALLERY_", case_sensitive=False, populate_by_name=True
    )

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "gallery-access"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Access policy: single exact-match admin identity.
    admin_email: str = ""

    # Session artifact / cookie
    session_duration_days: int = Field(default=5, ge=1, le=14)
    session_cookie_name: str = "session"
    cookie_secure: bool | None = None
    sign_in_path: str = "/login"

    # Identity provider
    identity_provider: Literal["firebase", "local"] = "firebase"
    provider_timeout_seconds: float = Field(default=10.0, gt=0, le=60)
    firebase_service_account_base64: str | None = Field(
        default=None,
        repr=False,
        validation_alias=AliasChoices(
            "FIREBASE_SERVICE_ACCOUNT_BASE64", "firebase_service_account_base64"
        ),
    )
    firebase_project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FIREBASE_PROJECT_ID", "firebase_project_id"),
    )
    firebase_client_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FIREBASE_CLIENT_EMAIL", "firebase_client_email"),
    )
    firebase_private_key: str | None = Field(
        default=None,
        repr=False,
        validation_alias=AliasChoices("FIREBASE_PRIVATE_KEY", "firebase_private_key"),
    )
    local_provider_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Profile store
    profile_store: Literal["sql", "firestore"] = "sql"
    profile_collection: str = "users"
    profile_store_missing: Literal["warn_once", "silent"] = "warn_once"
    profile_sync_blocking: bool = True
    database_url: str = "sqlite+aiosqlite:///./gallery_access.db"

    # Rate limiting (process-local)
    rate_limits: dict[str, RateLimitConfig] = Field(default_factory=default_rate_limits)

    @property
    def session_duration_ms(self) -> int:
        return self.session_duration_days * MS_PER_DAY

    @property
    def session_cookie_secure(self) -> bool:
        # Unset means "secure everywhere except local dev/test".
        if self.cookie_secure is None:
            return self.env == "prod"
        return self.cookie_secure


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Credential material is parsed by `auth.credentials`, not here: a malformed key
# must surface as ConfigurationError at app construction, not as a pydantic error.
