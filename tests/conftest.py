"""Shared fixtures: a fake device behind httpx.MockTransport."""

from __future__ import annotations

import json
import socket
from typing import Any, Callable, Union

import httpx
import pytest

from picoleaf.client import NanoleafClient

TEST_HOST = "127.0.0.1:16021"
TEST_TOKEN = "test-token"

Route = Union[tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakeDevice:
    """Records requests and answers them from a route table.

    Routes map ``(method, resource path)`` to a ``(status, body)`` tuple or a
    handler. Unknown PUTs answer 204 with an empty body.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Route] = {}

    def resource(self, request: httpx.Request) -> str:
        prefix = f"/api/v1/{TEST_TOKEN}/"
        path = request.url.path
        return path[len(prefix):] if path.startswith(prefix) else path

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, self.resource(request)))
        if callable(route):
            return route(request)
        if route is None:
            return httpx.Response(204 if request.method == "PUT" else 404)
        status, body = route
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def bodies(self) -> list[Any]:
        """Decoded JSON bodies of all requests that carried one."""
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def udp_listener():
    """A loopback UDP socket standing in for the external control port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(1.0)
    yield sock
    sock.close()


@pytest.fixture
def client(device: FakeDevice, udp_listener: socket.socket) -> NanoleafClient:
    return NanoleafClient(
        TEST_HOST,
        TEST_TOKEN,
        transport=httpx.MockTransport(device.handler),
        external_control_port=udp_listener.getsockname()[1],
    )
