# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Shared fixtures for gateway tests."""

import json
from typing import Any, Callable
from urllib.parse import parse_qs

import httpx
import pytest

from gateway_logging import SilentLogger
from oauth_gateway import CanonicalIdentity, ProviderId, load_gateway_config

TEST_SECRET = "test-signing-secret-that-is-long-enough-1234"
FIXED_NOW = 1_700_000_000


class FakeProviderServer:
    """Routes outbound provider calls to canned responses and records them.

    Responses are registered per "METHOD url" key; a value may be an
    ``httpx.Response``, a JSON-serializable body (status 200), or an
    exception instance to raise.
    """

    def __init__(self):
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, response: Any) -> None:
        self.routes[f"{method.upper()} {url}"] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?", 1)[0]
        response = self.routes.get(f"{request.method} {url}")
        if response is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}

    @staticmethod
    def json_body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content)


@pytest.fixture
def provider_server() -> FakeProviderServer:
    return FakeProviderServer()


@pytest.fixture
def base_environ() -> dict[str, str]:
    """Complete environment for a development deployment."""
    return {
        "GOOGLE_CLIENT_ID": "google-client-id",
        "GOOGLE_CLIENT_SECRET": "google-client-secret",
        "GITHUB_CLIENT_ID": "github-client-id",
        "GITHUB_CLIENT_SECRET": "github-client-secret",
        "SESSION_SECRET": TEST_SECRET,
        "APP_URL": "http://localhost:3000",
        "PORT": "3000",
    }


@pytest.fixture
def silent_logger() -> SilentLogger:
    return SilentLogger(name="test")


@pytest.fixture
def gateway_config(base_environ, silent_logger):
    return load_gateway_config(base_environ, log=silent_logger)


@pytest.fixture
def clock() -> Callable[[], float]:
    """Mutable fake clock: set ``clock.now`` to move time."""

    class _Clock:
        now: float = FIXED_NOW

        def __call__(self) -> float:
            return self.now

    return _Clock()


@pytest.fixture
def google_identity() -> CanonicalIdentity:
    return CanonicalIdentity(
        external_id="42",
        email="a@x.com",
        display_name="A",
        avatar_url="https://example.com/a.png",
        provider_id=ProviderId.GOOGLE,
    )


@pytest.fixture
def github_identity() -> CanonicalIdentity:
    return CanonicalIdentity(
        external_id="7",
        email="",
        display_name="bob",
        avatar_url=None,
        provider_id=ProviderId.GITHUB,
    )


@pytest.fixture
def signing_secret() -> str:
    return TEST_SECRET
