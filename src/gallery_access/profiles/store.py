"""
gallery_access.profiles.store

Durable principal-profile store.

Responsibilities:
- Declare the `ProfileStore` boundary used during session creation and
  account deletion.
- Distinguish "the store itself does not exist" from "no such record".
- Provide the SQL-backed implementation (SQLAlchemy async).
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from sqlalchemy import delete
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery_access.db.models import PROFILE_FIELDS, UserProfile

ProfileFields = dict[str, Any]


class ProfileStoreNotFound(Exception):
    """The backing store (database/table) has not been provisioned."""


class ProfileNotFound(LookupError):
    """The store exists but holds no record for the subject."""


class ProfileStore(Protocol):
    async def get(self, subject_id: str) -> ProfileFields | None: ...

    async def set(self, subject_id: str, fields: ProfileFields) -> None: ...

    async def update(self, subject_id: str, fields: ProfileFields) -> None: ...

    async def delete(self, subject_id: str) -> None: ...


_MISSING_TABLE_MARKERS = ("no such table", "does not exist", "undefinedtable")


@contextmanager
def _translate_missing_store() -> Iterator[None]:
    try:
        yield
    except (OperationalError, ProgrammingError) as e:
        detail = str(e.orig if e.orig is not None else e).lower()
        if any(marker in detail for marker in _MISSING_TABLE_MARKERS):
            raise ProfileStoreNotFound(str(e)) from e
        raise


def _to_columns(fields: ProfileFields) -> dict[str, Any]:
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
    return {PROFILE_FIELDS[name]: value for name, value in fields.items()}


class SqlProfileStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = session_factory

    async def get(self, subject_id: str) -> ProfileFields | None:
        with _translate_missing_store():
            async with self._factory() as session:
                row = await session.get(UserProfile, subject_id)
                return row.to_fields() if row is not None else None

    async def set(self, subject_id: str, fields: ProfileFields) -> None:
        columns = _to_columns({**fields, "uid": subject_id})
        with _translate_missing_store():
            async with self._factory() as session, session.begin():
                await session.merge(UserProfile(**columns))

    async def update(self, subject_id: str, fields: ProfileFields) -> None:
        columns = _to_columns(fields)
        columns.pop("uid", None)
        with _translate_missing_store():
            async with self._factory() as session, session.begin():
                row = await session.get(UserProfile, subject_id, with_for_update=True)
                if row is None:
                    raise ProfileNotFound(subject_id)
                for attr, value in columns.items():
                    setattr(row, attr, value)

    async def delete(self, subject_id: str) -> None:
        with _translate_missing_store():
            async with self._factory() as session, session.begin():
                await session.execute(delete(UserProfile).where(UserProfile.uid == subject_id))


# --- Module Notes -----------------------------------------------------------
# Firestore implementation lives in `profiles.firestore_store`; both raise the
# same two exceptions so session code never inspects backend-specific errors.
