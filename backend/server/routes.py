"""
Route registration for the wake API.

Responsibilities:
- Define the unauthenticated health, wake and ping endpoints
- Report process uptime from app.state
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI

from constants import HEALTH_PATH, PING_PATH, PING_STATUS_PONG, WAKE_PATH, WAKE_STATUS_AWAKE


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""

    def uptime_s() -> float:
        return time.monotonic() - app.state.started_at

    @app.get(HEALTH_PATH)
    async def health() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        return {
            "status": "healthy",
            "uptime": uptime_s(),
            "timestamp": _iso_now(),
        }

    @app.get(WAKE_PATH)
    async def wake() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        return {
            "status": WAKE_STATUS_AWAKE,
            "message": "Server is ready",
            "timestamp": _iso_now(),
            "uptime": uptime_s(),
        }

    @app.post(PING_PATH)
    async def ping() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        return {
            "status": PING_STATUS_PONG,
            "serverTime": _iso_now(),
        }


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()
