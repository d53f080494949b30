"""
gallery_access.ratelimit

Rate limiting package.

Responsibilities:
- In-memory sliding-window limiter keyed by action + client fingerprint.
- Default per-action policy table.
"""

# Package marker; import from `gallery_access.ratelimit.limiter`.
