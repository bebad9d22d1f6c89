"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No connectivity logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import DEFAULT_API_BASE_URL, KEEP_ALIVE_INTERVAL_S


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the warm-up manager, the tracker and the server.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str

    # ------------------------------------------------------------------
    # Backend
    # ------------------------------------------------------------------

    api_base_url: str

    # ------------------------------------------------------------------
    # Keep-alive
    # ------------------------------------------------------------------

    keep_alive_interval_s: float

    @property
    def analytics_base_url(self) -> str:
        """Backend origin for analytics calls (any trailing /api removed)."""
        return strip_api_suffix(self.api_base_url)

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if KEEP_ALIVE_INTERVAL_S is not a positive number.
        """
        interval_s = float(
            os.environ.get("KEEP_ALIVE_INTERVAL_S", str(KEEP_ALIVE_INTERVAL_S))
        )
        if interval_s <= 0:
            raise ValueError("KEEP_ALIVE_INTERVAL_S must be positive")

        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            api_base_url=os.environ.get("API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            keep_alive_interval_s=interval_s,
        )


def strip_api_suffix(url: str) -> str:
    """Remove one trailing '/api' path segment, if present."""
    url = url.rstrip("/")
    if url.endswith("/api"):
        return url[: -len("/api")]
    return url
