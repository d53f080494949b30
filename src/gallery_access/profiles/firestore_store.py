"""
gallery_access.profiles.firestore_store

Firestore-backed profile store.

Responsibilities:
- Read/write `users/{uid}` documents with the Firestore client bound to the
  same service account as the identity provider.
- Map a missing database (gRPC NOT_FOUND on the database itself) to
  `ProfileStoreNotFound`.
"""

from __future__ import annotations

import asyncio

from google.api_core import exceptions as gexc
from google.cloud import firestore
from google.oauth2 import service_account

from gallery_access.auth.credentials import ServiceAccountCredential
from gallery_access.profiles.store import ProfileFields, ProfileNotFound, ProfileStoreNotFound


def create_firestore_client(credential: ServiceAccountCredential) -> firestore.Client:
    creds = service_account.Credentials.from_service_account_info(credential.to_certificate_info())
    return firestore.Client(project=credential.project_id, credentials=creds)


class FirestoreProfileStore:
    def __init__(self, client: firestore.Client, *, collection: str = "users") -> None:
        self._client = client
        self._collection = collection

    def _doc(self, subject_id: str):
        return self._client.collection(self._collection).document(subject_id)

    async def get(self, subject_id: str) -> ProfileFields | None:
        snapshot = await self._run(self._doc(subject_id).get)
        return snapshot.to_dict() if snapshot.exists else None

    async def set(self, subject_id: str, fields: ProfileFields) -> None:
        await self._run(self._doc(subject_id).set, {**fields, "uid": subject_id})

    async def update(self, subject_id: str, fields: ProfileFields) -> None:
        try:
            await self._run(self._doc(subject_id).update, fields)
        except ProfileStoreNotFound as e:
            # update() on a missing document is also NOT_FOUND; only a missing record
            # in an existing database should become ProfileNotFound.
            if await self._database_exists():
                raise ProfileNotFound(subject_id) from e
            raise

    async def delete(self, subject_id: str) -> None:
        await self._run(self._doc(subject_id).delete)

    async def _database_exists(self) -> bool:
        try:
            await self._run(self._client.collection(self._collection).limit(1).get)
        except ProfileStoreNotFound:
            return False
        return True

    @staticmethod
    async def _run(fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except gexc.NotFound as e:
            raise ProfileStoreNotFound(str(e)) from e
