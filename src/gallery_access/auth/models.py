"""
gallery_access.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`).
- Define the small result types returned by session operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Identity resolved from a verified session artifact. Never persisted.

    `is_admin` is a display hint stamped at resolution time; privileged
    operations re-check the access policy against `email` instead.
    """

    subject_id: str
    email: str | None
    display_name: str | None
    picture_url: str | None
    is_admin: bool

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "uid": self.subject_id,
            "email": self.email,
            "displayName": self.display_name,
            "photoURL": self.picture_url,
            "isAdmin": self.is_admin,
        }


@dataclass(frozen=True, slots=True)
class ActionResult:
    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ActionResult:
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> ActionResult:
        return cls(success=False, error=error)


@dataclass(frozen=True, slots=True)
class Redirect:
    # Executed by the calling layer; session code never performs the jump itself.
    target: str


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API, services and tests.
