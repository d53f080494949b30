"""
tests.test_account_service

Account deletion: ordering, bounded provider calls and store failures.
"""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from gallery_access.auth.errors import ProviderError
from gallery_access.auth.models import Principal
from gallery_access.profiles.store import ProfileStoreNotFound
from gallery_access.services.account_service import DELETE_FAILED_MESSAGE, AccountService
from tests.conftest import make_jar

PRINCIPAL = Principal(
    subject_id="user-1",
    email="someone@example.com",
    display_name=None,
    picture_url=None,
    is_admin=False,
)


@pytest.fixture
def accounts(manager, profiles) -> AccountService:
    return AccountService(sessions=manager, profiles=profiles)


@pytest.mark.asyncio
async def test_delete_account_revokes_removes_and_signs_out(accounts, provider, profiles) -> None:
    profiles.records["user-1"] = {"uid": "user-1"}
    jar = make_jar("artifact")

    result = await accounts.delete_account(PRINCIPAL, jar)

    assert result.success is True
    assert jar.deleted is True
    assert "user-1" not in profiles.records
    assert provider.calls == [
        ("revoke_all_sessions_for", "user-1"),
        ("delete_subject", "user-1"),
    ]


@pytest.mark.asyncio
async def test_missing_profile_store_does_not_block_deletion(accounts, provider, profiles) -> None:
    profiles.delete_error = ProfileStoreNotFound("no such table: user_profiles")
    result = await accounts.delete_account(PRINCIPAL, make_jar("artifact"))

    assert result.success is True
    assert ("delete_subject", "user-1") in provider.calls


@pytest.mark.asyncio
async def test_hanging_provider_delete_times_out(accounts, provider) -> None:
    provider.delete_delay = 3600
    jar = make_jar("artifact")

    result = await asyncio.wait_for(accounts.delete_account(PRINCIPAL, jar), timeout=2.0)

    assert result.success is False
    assert result.error == DELETE_FAILED_MESSAGE
    assert jar.deleted is False


@pytest.mark.asyncio
async def test_store_failure_reports_failed_deletion(accounts, provider, profiles) -> None:
    profiles.delete_error = OperationalError("DELETE FROM user_profiles", {}, Exception("database is locked"))
    jar = make_jar("artifact")

    result = await accounts.delete_account(PRINCIPAL, jar)

    assert result.success is False
    assert result.error == DELETE_FAILED_MESSAGE
    assert jar.deleted is False
    # The provider subject is kept when the profile could not be removed.
    assert ("delete_subject", "user-1") not in provider.calls


@pytest.mark.asyncio
async def test_hanging_store_delete_times_out(accounts, profiles) -> None:
    profiles.delay = 3600
    result = await asyncio.wait_for(accounts.delete_account(PRINCIPAL, make_jar("artifact")), timeout=2.0)
    assert result.success is False


@pytest.mark.asyncio
async def test_provider_failure_reports_failed_deletion(accounts, provider) -> None:
    async def refuse(subject_id: str) -> None:
        raise ProviderError("auth/internal-error", "backend down")

    provider.delete_subject = refuse
    result = await accounts.delete_account(PRINCIPAL, make_jar("artifact"))
    assert result.success is False
