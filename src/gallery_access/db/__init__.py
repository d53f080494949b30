"""
gallery_access.db

Persistence package (SQLAlchemy async) backing the SQL profile store.

Responsibilities:
- Provide the ORM model, engine/session setup and dev bootstrap.
"""

# Package marker.
