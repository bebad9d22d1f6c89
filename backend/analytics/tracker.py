"""
Visitor session tracker.

Responsibilities:
- Keep one analytics session id per browsing session (via StoragePort)
- Report page views with time spent on the previous page
- Report session end and forget the session id

Non-responsibilities:
- No retries: analytics is best-effort
- No exceptions to callers: every network failure is logged and dropped
"""

from __future__ import annotations

import json
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from analytics.client_info import browser_name, classify_device, os_name
from analytics.storage import StoragePort
from config import strip_api_suffix
from constants import (
    ANALYTICS_SESSION_KEY,
    ANALYTICS_SESSION_PATH,
    ANALYTICS_TIMEOUT_S,
    ANALYTICS_TRACK_PATH,
    AUTH_STORAGE_KEY,
    SESSION_ID_RANDOM_CHARS,
)
from observability.logger import log_event

_BASE36 = string.digits + string.ascii_lowercase


def generate_session_id(now_s: float) -> str:
    """session_<epoch_ms>_<random base36>"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(SESSION_ID_RANDOM_CHARS))
    return f"session_{int(now_s * 1000)}_{suffix}"


class VisitorTracker:
    """
    Page-view and session tracking for one browsing session.

    `session_storage` holds the session id (tab lifetime).
    `auth_storage` holds the signed-in user's "auth" JSON entry, if any.
    """

    def __init__(
        self,
        *,
        base_url: str,
        session_storage: StoragePort,
        auth_storage: StoragePort,
        user_agent: str,
        referrer: str = "",
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._base_url = strip_api_suffix(base_url)
        self._session_storage = session_storage
        self._auth_storage = auth_storage
        self._user_agent = user_agent
        self._referrer = referrer
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()
        self._clock = clock

        self._session_id: str | None = None
        self._current_page: str | None = None
        self._page_start_s: float | None = None

    # ------------------------------------------------------------------
    # Session identity
    # ------------------------------------------------------------------

    def session_id(self) -> str:
        """Cached id, else the stored one, else a freshly stored one."""
        if self._session_id is None:
            stored = self._session_storage.get(ANALYTICS_SESSION_KEY)
            if not stored:
                stored = generate_session_id(self._clock())
                self._session_storage.set(ANALYTICS_SESSION_KEY, stored)
            self._session_id = stored
        return self._session_id

    @property
    def current_page(self) -> str | None:
        return self._current_page

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def track_page_view(self, page: str) -> bool:
        """
        Report a page view. Any response status counts as delivered.

        Returns False only when the request could not be sent.
        """
        previous_page_duration = 0
        if self._current_page is not None:
            previous_page_duration = self._elapsed_s()

        self._current_page = page
        self._page_start_s = self._clock()

        user_id, company_id, is_authenticated = self._auth_identity()
        payload: dict[str, Any] = {
            "sessionId": self.session_id(),
            "page": page,
            "deviceType": classify_device(self._user_agent),
            "browser": browser_name(self._user_agent),
            "os": os_name(self._user_agent),
            "referrer": self._referrer,
            "userAgent": self._user_agent,
            "isAuthenticated": is_authenticated,
            "userId": user_id,
            "companyId": company_id,
            "previousPageDuration": previous_page_duration,
        }

        try:
            await self._client.post(
                f"{self._base_url}{ANALYTICS_TRACK_PATH}",
                json=payload,
                timeout=ANALYTICS_TIMEOUT_S,
            )
        except httpx.HTTPError as exc:
            log_event({
                "event_type": "ANALYTICS_TRACK_ERROR",
                "level": "debug",
                "page": page,
                "error": f"{type(exc).__name__}: {exc}",
            })
            return False
        return True

    async def end_session(self) -> bool:
        """
        Report session end, then forget the session id.

        The id is kept when the report fails so a later call can retry.
        """
        session_id = self.session_id()
        payload = {
            "finalPageDuration": self._elapsed_s(),
            "endTime": datetime.now(timezone.utc).isoformat(),
        }

        try:
            response = await self._client.put(
                f"{self._base_url}{ANALYTICS_SESSION_PATH.format(session_id=session_id)}",
                json=payload,
                timeout=ANALYTICS_TIMEOUT_S,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            log_event({
                "event_type": "ANALYTICS_SESSION_END_ERROR",
                "level": "debug",
                "session_id": session_id,
                "error": f"{type(exc).__name__}: {exc}",
            })
            return False

        self._session_storage.remove(ANALYTICS_SESSION_KEY)
        self._session_id = None
        return True

    def on_visibility_change(self, hidden: bool) -> None:
        """Tab hidden: log time on page. Tab visible: restart page timer."""
        if hidden:
            if self._page_start_s is not None:
                log_event({
                    "event_type": "ANALYTICS_PAGE_HIDDEN",
                    "level": "debug",
                    "page": self._current_page,
                    "duration_s": self._elapsed_s(),
                })
            return
        self._page_start_s = self._clock()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _elapsed_s(self) -> int:
        if self._page_start_s is None:
            return 0
        return max(0, int(self._clock() - self._page_start_s))

    def _auth_identity(self) -> tuple[Any, Any, bool]:
        """(user_id, company_id, is_authenticated) from the auth entry."""
        raw = self._auth_storage.get(AUTH_STORAGE_KEY)
        if not raw:
            return None, None, False
        try:
            auth = json.loads(raw)
        except ValueError:
            return None, None, False
        if not isinstance(auth, dict):
            return None, None, False

        user = auth.get("user") or {}
        company = auth.get("company") or {}
        user_id = user.get("id") if isinstance(user, dict) else None
        company_id = company.get("id") if isinstance(company, dict) else None
        return user_id, company_id, True
