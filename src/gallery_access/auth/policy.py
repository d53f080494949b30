"""
gallery_access.auth.policy

Static admin predicate.

Responsibilities:
- Decide whether an email is the single configured admin identity.
- Provide the typed denial returned to privileged callers.
"""

from __future__ import annotations

from dataclasses import dataclass

ADMIN_REQUIRED_MESSAGE = "Unauthorized: Admin access required"


def is_admin_email(email: str | None, admin_email: str | None) -> bool:
    # Exact, case-sensitive match only. No normalization, no patterns.
    if not email or not admin_email:
        return False
    return email == admin_email


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    admin_email: str

    def allows(self, email: str | None) -> bool:
        return is_admin_email(email, self.admin_email)


@dataclass(frozen=True, slots=True)
class AuthorizationDenied:
    # Deliberately generic: must not reveal whether the target exists.
    message: str = ADMIN_REQUIRED_MESSAGE
