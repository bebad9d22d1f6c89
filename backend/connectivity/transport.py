"""
Wake/ping transport contract and its HTTP implementation.

Purpose:
- Issue exactly one network call per method invocation.
- Normalize every failure (timeout, connect error, bad status,
  bad body) into TransportError.
- Keep retries, delays and state OUT of the transport.

No authentication headers are attached to these calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from constants import PING_PATH, WAKE_PATH


class TransportError(Exception):
    """A single wake or ping call did not produce a usable response."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class WakeTransport(ABC):
    """
    Abstract transport for the wake and ping endpoints.

    The transport is a *dumb pipe*: one call in, one JSON object out.

    Manager responsibilities (NOT here):
    - Retry policy
    - Backoff delays
    - Interpreting the status field
    """

    @abstractmethod
    async def wake(self, timeout_s: float) -> dict[str, Any]:
        """
        Call the wake endpoint once.

        Contract:
        - Must give up after timeout_s.
        - Must raise TransportError on any failure.
        - Must NOT retry internally.
        """
        raise NotImplementedError

    @abstractmethod
    async def ping(self, timeout_s: float) -> dict[str, Any]:
        """Call the ping endpoint once. Same contract as wake()."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None


class HttpWakeTransport(WakeTransport):
    """httpx-backed transport for GET /api/wake and POST /api/ping."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def wake(self, timeout_s: float) -> dict[str, Any]:
        return await self._request("GET", WAKE_PATH, timeout_s)

    async def ping(self, timeout_s: float) -> dict[str, Any]:
        return await self._request("POST", PING_PATH, timeout_s, json={})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        timeout_s: float,
        **kwargs: Any,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(
                method, url, timeout=timeout_s, **kwargs
            )
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise TransportError(f"timeout after {timeout_s:g}s", cause=exc) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"HTTP {exc.response.status_code}", cause=exc
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}", cause=exc) from exc
        except ValueError as exc:
            raise TransportError("response body is not JSON", cause=exc) from exc

        if not isinstance(body, dict):
            raise TransportError("response body is not a JSON object")
        return body
