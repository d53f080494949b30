"""
gallery_access.db.models

Persistence schema for principal profiles.

Responsibilities:
- Define the `UserProfile` row written on sign-in (create-if-absent, else touch).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from gallery_access.db.base import Base

# Profile field name -> column attribute. Field names match the Firestore document.
PROFILE_FIELDS = {
    "uid": "uid",
    "email": "email",
    "displayName": "display_name",
    "photoURL": "photo_url",
    "isBanned": "is_banned",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class UserProfile(Base):
    __tablename__ = "user_profiles"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="", index=True)
    display_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    is_banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_fields(self) -> dict[str, Any]:
        return {name: getattr(self, attr) for name, attr in PROFILE_FIELDS.items()}


# --- Module Notes -----------------------------------------------------------
# Display fields here are a snapshot from the provider claims at sign-in;
# the provider remains the source of truth for identity.
