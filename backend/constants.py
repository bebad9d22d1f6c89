"""
BEHAVIOR-AS-CONSTANTS
---------------------
Single source of truth for all behavioral values in the client.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Deployment-specific values (URLs, environment) live in config.py.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Endpoints
# =============================================================================

DEFAULT_API_BASE_URL: Final[str] = "https://sap-business-management-software.koyeb.app"

WAKE_PATH: Final[str] = "/api/wake"
PING_PATH: Final[str] = "/api/ping"
HEALTH_PATH: Final[str] = "/api/health"

ANALYTICS_TRACK_PATH: Final[str] = "/api/analytics/track"
ANALYTICS_SESSION_PATH: Final[str] = "/api/analytics/session/{session_id}"

WAKE_STATUS_AWAKE: Final[str] = "awake"
PING_STATUS_PONG: Final[str] = "pong"

# =============================================================================
# Wake-up cycle (exponential backoff)
# =============================================================================

WAKE_MAX_ATTEMPTS: Final[int] = 10
WAKE_BASE_TIMEOUT_S: Final[float] = 10.0
WAKE_BACKOFF_MULTIPLIER: Final[float] = 2.0

# Timeout stops growing after this many doublings (10s -> 80s)
WAKE_MAX_TIMEOUT_EXPONENT: Final[int] = 3

WAKE_BASE_DELAY_S: Final[float] = 1.0
WAKE_MAX_DELAY_S: Final[float] = 10.0

# Consecutive exhausted cycles before the backend is flagged as down
WAKE_DEGRADED_THRESHOLD: Final[int] = 3

# =============================================================================
# Keep-alive
# =============================================================================

PING_TIMEOUT_S: Final[float] = 5.0
KEEP_ALIVE_INTERVAL_S: Final[float] = 5 * 60.0

# =============================================================================
# First-load follow-up probes
# =============================================================================

# Single-shot probes after a failed first wake cycle:
# every FOLLOWUP_INTERVAL_S until FOLLOWUP_BUDGET_S is spent.
FOLLOWUP_INTERVAL_S: Final[float] = 3.0
FOLLOWUP_BUDGET_S: Final[float] = 30.0

# =============================================================================
# Visitor analytics
# =============================================================================

ANALYTICS_TIMEOUT_S: Final[float] = 3.0
ANALYTICS_SESSION_KEY: Final[str] = "analytics_session_id"
AUTH_STORAGE_KEY: Final[str] = "auth"
SESSION_ID_RANDOM_CHARS: Final[int] = 9
