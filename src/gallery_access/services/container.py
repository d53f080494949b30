"""
gallery_access.services.container

Explicit construction of the service's stateful components.

Responsibilities:
- Load credentials and initialize the identity provider (fail fast with
  ConfigurationError before the app can serve).
- Build the profile store, rate limiter, access policy and session manager.
- Hand the assembled graph to the API layer; no module-level singletons.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncEngine

from gallery_access.auth.cookies import SessionCookiePolicy
from gallery_access.auth.credentials import ServiceAccountCredential, load_from_settings
from gallery_access.auth.errors import ConfigurationError
from gallery_access.auth.local_provider import LocalIdentityProvider
from gallery_access.auth.policy import AccessPolicy
from gallery_access.auth.provider import IdentityProvider
from gallery_access.auth.sessions import SessionManager
from gallery_access.db.session import create_engine, create_sessionmaker
from gallery_access.profiles.store import ProfileStore, SqlProfileStore
from gallery_access.ratelimit.limiter import RateLimiter
from gallery_access.settings import Settings


@dataclass(slots=True)
class Services:
    settings: Settings
    provider: IdentityProvider
    policy: AccessPolicy
    profiles: ProfileStore
    limiter: RateLimiter
    sessions: SessionManager
    cookie_policy: SessionCookiePolicy
    engine: AsyncEngine | None = field(default=None)

    async def aclose(self) -> None:
        await self.sessions.drain()
        if self.engine is not None:
            await self.engine.dispose()


def build_services(
    settings: Settings,
    *,
    provider: IdentityProvider | None = None,
    profiles: ProfileStore | None = None,
    limiter: RateLimiter | None = None,
) -> Services:
    credential: ServiceAccountCredential | None = None
    if settings.identity_provider == "firebase" or settings.profile_store == "firestore":
        credential = load_from_settings(settings)

    if provider is None:
        provider = _build_provider(settings, credential)

    engine: AsyncEngine | None = None
    if profiles is None:
        if settings.profile_store == "firestore":
            from gallery_access.profiles.firestore_store import (
                FirestoreProfileStore,
                create_firestore_client,
            )

            profiles = FirestoreProfileStore(
                create_firestore_client(credential), collection=settings.profile_collection
            )
        else:
            engine = create_engine(settings)
            profiles = SqlProfileStore(create_sessionmaker(engine))

    policy = AccessPolicy(admin_email=settings.admin_email)
    sessions = SessionManager(
        provider=provider,
        policy=policy,
        profiles=profiles,
        duration_ms=settings.session_duration_ms,
        sign_in_path=settings.sign_in_path,
        provider_timeout=settings.provider_timeout_seconds,
        profile_store_missing=settings.profile_store_missing,
        profile_sync_blocking=settings.profile_sync_blocking,
    )
    return Services(
        settings=settings,
        provider=provider,
        policy=policy,
        profiles=profiles,
        limiter=limiter or RateLimiter(settings.rate_limits),
        sessions=sessions,
        cookie_policy=SessionCookiePolicy.from_settings(settings),
        engine=engine,
    )


def _build_provider(
    settings: Settings, credential: ServiceAccountCredential | None
) -> IdentityProvider:
    if settings.identity_provider == "local":
        if settings.env == "prod":
            raise ConfigurationError("The local identity provider cannot be used in prod.")
        return LocalIdentityProvider(secret=settings.local_provider_secret)

    from gallery_access.auth.firebase_provider import (
        FirebaseIdentityProvider,
        initialize_firebase_app,
    )

    app = initialize_firebase_app(credential, name=settings.service_name)
    return FirebaseIdentityProvider(app)


# --- Module Notes -----------------------------------------------------------
# Firebase/Firestore imports are deferred so dev/test runs on the local provider
# and SQL store do not initialize Google SDK clients.
