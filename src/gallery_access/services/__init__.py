"""
gallery_access.services

Service layer.

Responsibilities:
- Composition of stateful components (`container`).
- Multi-step workflows on top of the session manager (`account_service`).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request parsing + rate limiting + delegation to here.
