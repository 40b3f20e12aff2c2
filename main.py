"""
main.py: server launcher and entry point.

Run this file to start the planning analytics API:

    python main.py

The interactive API docs open at http://127.0.0.1:8000/docs

This file does NOT contain application logic. See app.py for the FastAPI
application and service wiring.

Direct uvicorn usage:
    uvicorn app:app --reload
"""

from __future__ import annotations

import os

import uvicorn


HOST = os.getenv("HOTEL_PLANNING_HOST", "127.0.0.1")
PORT = int(os.getenv("HOTEL_PLANNING_PORT", "8000"))


def main() -> None:
    """Start the planning analytics server."""
    print("=" * 60)
    print("  Hotel Planning Analytics")
    print("=" * 60)
    print(f"  Server   : http://{HOST}:{PORT}")
    print(f"  API docs : http://{HOST}:{PORT}/docs")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    # Blocks until CTRL+C
    uvicorn.run(
        "app:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
