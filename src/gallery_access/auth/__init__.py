"""
gallery_access.auth

Authentication/authorization package.

Responsibilities:
- Credential loading and private-key normalization.
- Identity provider adapters (Firebase, local JWT).
- Session lifecycle (`SessionManager`) and the static admin policy.
- FastAPI dependencies for cookies and rate limiting.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `errors.ConfigurationError` is the only exception from this package allowed
# to abort startup; everything else resolves to result values.
