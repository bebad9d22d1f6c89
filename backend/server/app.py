"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Record process start time for uptime reporting
- Register routes
"""

from __future__ import annotations

import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig

from server.routes import register_routes


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    App factory so tests can build isolated instances and
    ASGI servers can import a ready app.
    """
    config = config or AppConfig.load_from_env()

    app = FastAPI(title="Backend Wake API")

    app.state.config = config
    app.state.started_at = time.monotonic()

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten later
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    register_routes(app)

    return app
