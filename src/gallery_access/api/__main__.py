"""
gallery_access.api.__main__

Entrypoint for running the service via `python -m gallery_access.api`.

Responsibilities:
- Load settings and create the app (credential problems abort here).
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import sys

import uvicorn

from gallery_access.api.app import create_app
from gallery_access.auth.errors import ConfigurationError
from gallery_access.settings import get_settings


def main() -> None:
    settings = get_settings()
    try:
        app = create_app(settings=settings)
    except ConfigurationError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
