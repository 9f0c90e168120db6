"""
main.py: server launcher and entry point.

Run this file to start the reservation API:

    python main.py

This file does NOT contain application logic. See app.py for the FastAPI
application, service wiring, and startup sequence.

Direct uvicorn usage:
    uvicorn app:app --reload
"""

from __future__ import annotations

import uvicorn

from kino.utils.config import get_settings


def main() -> None:
    """Start the reservation API server."""
    settings = get_settings()
    print("=" * 60)
    print(f"  {settings.app_name} {settings.app_version}")
    print("=" * 60)
    print(f"  Server  : http://{settings.host}:{settings.port}")
    print(f"  API docs: http://{settings.host}:{settings.port}/docs")
    print(f"  Database: {settings.database_path}")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    uvicorn.run(
        "app:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
