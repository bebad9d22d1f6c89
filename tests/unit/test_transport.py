# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
import json
from typing import Any, Callable

import httpx
import pytest

from connectivity.transport import HttpWakeTransport, TransportError

BASE_URL = "https://backend.example"

Handler = Callable[[httpx.Request], httpx.Response]


def call(handler: Handler, method: str, timeout_s: float = 5.0) -> Any:
    async def scenario() -> Any:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            transport = HttpWakeTransport(BASE_URL + "/", client=client)
            return await getattr(transport, method)(timeout_s)

    return asyncio.run(scenario())


# ---------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------

def test_wake_issues_get_with_timeout():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "awake", "uptime": 3.5})

    body = call(handler, "wake", timeout_s=40.0)

    assert body == {"status": "awake", "uptime": 3.5}
    assert seen[0].method == "GET"
    assert str(seen[0].url) == "https://backend.example/api/wake"
    assert seen[0].extensions["timeout"]["read"] == 40.0
    assert "authorization" not in seen[0].headers


def test_ping_issues_post_with_empty_object():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "pong"})

    assert call(handler, "ping") == {"status": "pong"}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/ping"
    assert json.loads(seen[0].content) == {}


# ---------------------------------------------------------------------
# Failures are normalized
# ---------------------------------------------------------------------

def _timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("slow", request=request)


def _refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("refused", request=request)


@pytest.mark.parametrize(
    ("handler", "message"),
    [
        (_timeout, "timeout"),
        (_refused, "ConnectError"),
        (lambda request: httpx.Response(503, text="sleeping"), "HTTP 503"),
        (lambda request: httpx.Response(200, text="<html>"), "not JSON"),
        (lambda request: httpx.Response(200, json=["awake"]), "not a JSON object"),
    ],
)
def test_failures_raise_transport_error(handler: Handler, message: str):
    with pytest.raises(TransportError, match=message):
        call(handler, "wake")


def test_aclose_leaves_injected_client_open():
    async def scenario() -> bool:
        client = httpx.AsyncClient()
        transport = HttpWakeTransport(BASE_URL, client=client)
        await transport.aclose()
        still_open = not client.is_closed
        await client.aclose()
        return still_open

    assert asyncio.run(scenario()) is True
