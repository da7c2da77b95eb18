"""Shared test fixtures for oauthbridge.

Provides factories for provider descriptors and client registrations, a
recording mock transport for the provider endpoints, and output-state
isolation. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Optional

import httpx
import pytest

from oauthbridge.models import ClientRegistration, ProviderDescriptor
from oauthbridge.output import reset_output


BASE_DESCRIPTOR: dict[str, Any] = {
    "id": "acme",
    "name": "Acme ID",
    "redirect_uri": "https://app.example.com/callback/acme",
    "endpoints": {
        "authorize": {"url": "https://id.acme.test/oauth/authorize"},
        "token": {
            "url": "https://id.acme.test/oauth/token",
            "auth": "client_secret_basic",
        },
        "user": {
            "url": "https://api.acme.test/me",
            "auth": {"header": "Authorization", "scheme": "Bearer"},
        },
    },
    "mapping": {"id": "sub"},
}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once a CliRunner invocation finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Configuration factories
# ---------------------------------------------------------------------------


@pytest.fixture
def descriptor_data() -> dict[str, Any]:
    """A deep copy of the base descriptor mapping."""
    return copy.deepcopy(BASE_DESCRIPTOR)


@pytest.fixture
def make_descriptor() -> Callable[..., ProviderDescriptor]:
    """Factory building a descriptor from the base mapping.

    ``authorize``, ``token`` and ``user`` keyword arguments are merged into
    the matching endpoint mapping; every other keyword replaces a top-level
    field.
    """

    def _make(
        authorize: Optional[dict[str, Any]] = None,
        token: Optional[dict[str, Any]] = None,
        user: Optional[dict[str, Any]] = None,
        **fields: Any,
    ) -> ProviderDescriptor:
        data = copy.deepcopy(BASE_DESCRIPTOR)
        for name, overrides in (("authorize", authorize), ("token", token), ("user", user)):
            if overrides:
                data["endpoints"][name].update(overrides)
        data.update(fields)
        return ProviderDescriptor.model_validate(data)

    return _make


@pytest.fixture
def descriptor(make_descriptor: Callable[..., ProviderDescriptor]) -> ProviderDescriptor:
    return make_descriptor()


@pytest.fixture
def registration() -> ClientRegistration:
    return ClientRegistration(client_id="client-123", client_secret="s3cret")


# ---------------------------------------------------------------------------
# Mock provider
# ---------------------------------------------------------------------------


class MockProvider:
    """Routes requests to canned responses and records every request.

    Responses are keyed by URL without query string. A value may be an
    :class:`httpx.Response`, or an :class:`httpx.RequestError` subclass which is
    raised with the request attached.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = str(request.url).split("?")[0]
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"error": "not_found"})
        if isinstance(route, type) and issubclass(route, httpx.RequestError):
            raise route("connection refused", request=request)
        return route

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).split("?")[0] == url]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def http_client(provider: MockProvider) -> httpx.Client:
    client = provider.client()
    yield client
    client.close()
