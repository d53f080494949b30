"""
gallery_access.profiles

Principal profile persistence.

Responsibilities:
- `ProfileStore` boundary and its SQL / Firestore implementations.
"""

# Package marker.
