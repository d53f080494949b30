"""
gallery_access.api

API package for the session & access-control service.

Responsibilities:
- FastAPI app factory and router modules.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers translate result values (ActionResult, Redirect, AuthorizationDenied)
# into HTTP responses; they do not make session decisions themselves.
