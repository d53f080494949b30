"""
tests.conftest

Shared fakes for the session subsystem.

Responsibilities:
- Scriptable identity provider and profile store doubles.
- A recording logger so tests can assert on what was (not) logged.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from gallery_access.auth.cookies import CookieJar, SessionCookiePolicy
from gallery_access.auth.errors import ProviderError
from gallery_access.auth.policy import AccessPolicy
from gallery_access.auth.sessions import SessionManager

ADMIN_EMAIL = "ops@example.com"
FIVE_DAYS_MS = 5 * 86_400_000


@dataclass
class FakeProvider:
    bearer_claims: dict[str, Any] = field(
        default_factory=lambda: {
            "uid": "user-1",
            "email": "someone@example.com",
            "name": "Someone",
            "picture": "https://img.example.com/a.png",
        }
    )
    artifact: str = "artifact-123"
    session_claims: dict[str, Any] | None = None
    bearer_error: ProviderError | None = None
    session_error: ProviderError | None = None
    delay: float = 0.0
    delete_delay: float = 0.0
    calls: list[tuple[str, Any]] = field(default_factory=list)

    async def verify_bearer_token(self, token: str) -> dict[str, Any]:
        self.calls.append(("verify_bearer_token", token))
        await asyncio.sleep(self.delay)
        if self.bearer_error is not None:
            raise self.bearer_error
        return dict(self.bearer_claims)

    async def create_session_artifact(self, token: str, duration_ms: int) -> str:
        self.calls.append(("create_session_artifact", duration_ms))
        return self.artifact

    async def verify_session_artifact(self, artifact: str, *, check_revocation: bool) -> dict[str, Any]:
        self.calls.append(("verify_session_artifact", check_revocation))
        await asyncio.sleep(self.delay)
        if self.session_error is not None:
            raise self.session_error
        return dict(self.session_claims or self.bearer_claims)

    async def revoke_all_sessions_for(self, subject_id: str) -> None:
        self.calls.append(("revoke_all_sessions_for", subject_id))

    async def delete_subject(self, subject_id: str) -> None:
        self.calls.append(("delete_subject", subject_id))
        await asyncio.sleep(self.delete_delay)


@dataclass
class FakeProfileStore:
    records: dict[str, dict[str, Any]] = field(default_factory=dict)
    error: Exception | None = None
    delete_error: Exception | None = None
    delay: float = 0.0
    writes: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def get(self, subject_id: str) -> dict[str, Any] | None:
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.records.get(subject_id)

    async def set(self, subject_id: str, fields: dict[str, Any]) -> None:
        self.writes.append(("set", subject_id, fields))
        self.records[subject_id] = dict(fields)

    async def update(self, subject_id: str, fields: dict[str, Any]) -> None:
        self.writes.append(("update", subject_id, fields))
        self.records[subject_id].update(fields)

    async def delete(self, subject_id: str) -> None:
        self.writes.append(("delete", subject_id, {}))
        await asyncio.sleep(self.delay)
        if self.delete_error is not None:
            raise self.delete_error
        self.records.pop(subject_id, None)


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kw: Any) -> None:
        self.events.append((level, event, kw))

    def debug(self, event: str, **kw: Any) -> None:
        self._record("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._record("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._record("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._record("error", event, **kw)

    def at(self, level: str) -> list[str]:
        return [event for lvl, event, _ in self.events if lvl == level]


COOKIE_POLICY = SessionCookiePolicy(name="session", max_age=FIVE_DAYS_MS // 1000, secure=True)


def make_jar(value: str | None = None) -> CookieJar:
    return CookieJar(COOKIE_POLICY, value)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def profiles() -> FakeProfileStore:
    return FakeProfileStore()


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def manager(provider: FakeProvider, profiles: FakeProfileStore, recorder: RecordingLogger) -> SessionManager:
    return SessionManager(
        provider=provider,
        policy=AccessPolicy(admin_email=ADMIN_EMAIL),
        profiles=profiles,
        duration_ms=FIVE_DAYS_MS,
        provider_timeout=0.5,
        log=recorder,
    )
