"""
gallery_access.auth.credentials

Identity-provider service account loading.

Responsibilities:
- Accept either a Base64-encoded service-account JSON blob or three discrete
  fields (project id, client email, private key).
- Normalize the private key into canonical PEM regardless of how the
  deployment platform mangled it (escaped newlines, quotes, single-line Base64).
- Fail fast with `ConfigurationError` naming exactly what is missing.

Usage as a helper script (encodes a downloaded key file for deployment):

    python -m gallery_access.auth.credentials path/to/service-account.json
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import sys
from dataclasses import dataclass
from typing import Any

from gallery_access.auth.errors import ConfigurationError, CorruptPrivateKeyError

DEFAULT_KEY_LABEL = "PRIVATE KEY"
PEM_LINE_LENGTH = 64
TOKEN_URI = "https://oauth2.googleapis.com/token"

COMBINED_ENV = "FIREBASE_SERVICE_ACCOUNT_BASE64"
DISCRETE_ENV = {
    "project_id": "FIREBASE_PROJECT_ID",
    "client_email": "FIREBASE_CLIENT_EMAIL",
    "private_key": "FIREBASE_PRIVATE_KEY",
}

_MARKER_RE = re.compile(r"-----(?:BEGIN|END) ([A-Z0-9 ]*?)-----")
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")
_PEM_RE = re.compile(
    r"^-----BEGIN (?P<label>[A-Z0-9 ]+)-----\n"
    r"(?P<body>(?:[A-Za-z0-9+/=]{64}\n)*[A-Za-z0-9+/=]{1,64}\n)"
    r"-----END (?P=label)-----$"
)


@dataclass(frozen=True, slots=True)
class ServiceAccountCredential:
    project_id: str
    client_email: str
    private_key_pem: str

    def to_certificate_info(self) -> dict[str, Any]:
        # Shape expected by firebase_admin.credentials.Certificate.
        return {
            "type": "service_account",
            "project_id": self.project_id,
            "client_email": self.client_email,
            "private_key": self.private_key_pem,
            "token_uri": TOKEN_URI,
        }

    def __repr__(self) -> str:
        return (
            f"ServiceAccountCredential(project_id={self.project_id!r}, "
            f"client_email={self.client_email!r}, private_key_pem='***')"
        )


def normalize_private_key(raw: str) -> str:
    """
    Return the canonical PEM form of `raw`.

    Canonical means: header line, 64-character body lines, footer line,
    single trailing newline. Idempotent on its own output.
    """

    key = raw.strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in ("'", '"'):
        key = key[1:-1].strip()

    # Double-escaped first: replacing `\n` first would leave a stray backslash.
    key = key.replace("\\\\n", "\n").replace("\\n", "\n")
    key = key.replace("\r\n", "\n").strip()

    if _PEM_RE.match(key):
        return key + "\n"
    return _rebuild_pem(key)


def _rebuild_pem(key: str) -> str:
    marker = _MARKER_RE.search(key)
    label = marker.group(1).strip() if marker and marker.group(1).strip() else DEFAULT_KEY_LABEL

    body = _MARKER_RE.sub("", key)
    body = re.sub(r"\s+", "", body)
    if not body or not _BASE64_RE.match(body):
        raise CorruptPrivateKeyError(
            "Private key is corrupt: body is not valid Base64 and cannot be rebuilt into PEM."
        )

    lines = [body[i : i + PEM_LINE_LENGTH] for i in range(0, len(body), PEM_LINE_LENGTH)]
    return "\n".join([f"-----BEGIN {label}-----", *lines, f"-----END {label}-----"]) + "\n"


def load_service_account(
    *,
    combined_b64: str | None = None,
    project_id: str | None = None,
    client_email: str | None = None,
    private_key: str | None = None,
) -> ServiceAccountCredential:
    if combined_b64 and combined_b64.strip():
        return _from_combined(combined_b64)

    provided = {
        "project_id": project_id,
        "client_email": client_email,
        "private_key": private_key,
    }
    missing = [DISCRETE_ENV[name] for name, value in provided.items() if not value or not value.strip()]
    if missing:
        raise ConfigurationError(
            f"Missing identity provider credentials: {', '.join(missing)}. "
            f"Set them, or provide {COMBINED_ENV}."
        )

    return ServiceAccountCredential(
        project_id=project_id.strip(),  # type: ignore[union-attr]
        client_email=client_email.strip(),  # type: ignore[union-attr]
        private_key_pem=normalize_private_key(private_key),  # type: ignore[arg-type]
    )


def _from_combined(blob: str) -> ServiceAccountCredential:
    try:
        decoded = base64.b64decode("".join(blob.split()), validate=True)
        info = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ConfigurationError(f"{COMBINED_ENV} is not Base64-encoded JSON: {e}") from e

    if not isinstance(info, dict):
        raise ConfigurationError(f"{COMBINED_ENV} must decode to a JSON object.")

    missing = [name for name in DISCRETE_ENV if not isinstance(info.get(name), str) or not info[name].strip()]
    if missing:
        raise ConfigurationError(
            f"{COMBINED_ENV} is missing required fields: {', '.join(missing)}."
        )

    return ServiceAccountCredential(
        project_id=info["project_id"].strip(),
        client_email=info["client_email"].strip(),
        private_key_pem=normalize_private_key(info["private_key"]),
    )


def load_from_settings(settings) -> ServiceAccountCredential:
    return load_service_account(
        combined_b64=settings.firebase_service_account_base64,
        project_id=settings.firebase_project_id,
        client_email=settings.firebase_client_email,
        private_key=settings.firebase_private_key,
    )


def encode_service_account(json_text: str) -> str:
    """Validate a service-account JSON document and return its Base64 blob."""

    try:
        info = json.loads(json_text)
    except ValueError as e:
        raise ConfigurationError(f"Service account file is not valid JSON: {e}") from e
    missing = [name for name in DISCRETE_ENV if not isinstance(info, dict) or not info.get(name)]
    if missing:
        raise ConfigurationError(f"Service account JSON is missing: {', '.join(missing)}.")
    return base64.b64encode(json_text.encode("utf-8")).decode("ascii")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: python -m gallery_access.auth.credentials <service-account.json>", file=sys.stderr)
        return 2
    try:
        with open(args[0], encoding="utf-8") as fh:
            blob = encode_service_account(fh.read())
    except (OSError, ConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"{COMBINED_ENV}={blob}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())


# --- Module Notes -----------------------------------------------------------
# The combined blob wins over discrete fields when both are set; discrete fields
# are then ignored entirely rather than merged.
