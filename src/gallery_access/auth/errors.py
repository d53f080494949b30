"""
gallery_access.auth.errors

Error taxonomy for the session subsystem.

Responsibilities:
- Startup-fatal configuration errors.
- A tagged provider error with first-class `code`/`message` fields.
- Classification of verification failures into expected vs unexpected.
"""

from __future__ import annotations

from dataclasses import dataclass


class ConfigurationError(Exception):
    """Malformed or missing credential material. Fatal at startup."""


class CorruptPrivateKeyError(ConfigurationError):
    """The private key cannot be reconstructed into PEM."""


class ProviderError(Exception):
    """
    Failure reported by an identity provider adapter.

    Adapters translate every SDK-specific failure into this type so the
    session layer classifies on a stable `code` contract.
    """

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(f"[{code}] {message}" if message else code)
        self.code = code
        self.message = message


PROVIDER_TIMEOUT = "provider/timeout"
UNKNOWN_PROVIDER_ERROR = "unknown"

# Routine session invalidation; handled silently.
EXPECTED_SESSION_ERROR_CODES: frozenset[str] = frozenset(
    {
        "auth/session-cookie-expired",
        "auth/session-cookie-revoked",
        "auth/user-not-found",
        "auth/user-disabled",
        "auth/id-token-expired",
        "auth/id-token-revoked",
        "auth/argument-error",
    }
)


def is_expected_session_error(code: str) -> bool:
    return code in EXPECTED_SESSION_ERROR_CODES


@dataclass(frozen=True, slots=True)
class ExpectedSessionError:
    code: str
    message: str


@dataclass(frozen=True, slots=True)
class UnexpectedSessionError:
    code: str
    message: str


def classify_session_error(err: ProviderError) -> ExpectedSessionError | UnexpectedSessionError:
    code = err.code or UNKNOWN_PROVIDER_ERROR
    message = err.message or "Session verification failed"
    if is_expected_session_error(code):
        return ExpectedSessionError(code=code, message=message)
    return UnexpectedSessionError(code=code, message=message)


# --- Module Notes -----------------------------------------------------------
# Only ConfigurationError is meant to propagate out of this package; everything
# else is converted to optionals/booleans/result values at the SessionManager boundary.
