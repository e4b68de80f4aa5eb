"""Pytest fixtures: a stub PayPal API behind httpx.MockTransport and an API test client."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_app_config, get_gateway
from src.api.main import app
from src.integrations.clients.real_http.paypal_oauth import TOKEN_PATH
from src.integrations.clients.real_http.paypal_rest import PayPalRestClient
from src.utils.config_loader import AppConfig, PayPalConfig


class StubPayPal:
    """Records every outbound request and answers from a (method, path) table."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.reply("POST", TOKEN_PATH, 200, {"access_token": "A21-test-token", "token_type": "Bearer", "expires_in": 32400})

    def reply(self, method: str, path: str, status: int, body: Any = None, text: Optional[str] = None) -> None:
        def _respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)

        self.routes[(method, path)] = _respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND", "path": request.url.path})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def json_body(self, path: str, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.calls(path)[index].content)

    @property
    def api_requests(self) -> List[httpx.Request]:
        """Outbound calls other than token acquisition."""
        return [r for r in self.requests if r.url.path != TOKEN_PATH]


@pytest.fixture
def paypal_config():
    return PayPalConfig(
        client_id="client-id",
        client_secret="client-secret",
        api_base="https://api.paypal.test",
    )


@pytest.fixture
def app_config(paypal_config):
    return AppConfig(paypal=paypal_config)


@pytest.fixture
def stub():
    return StubPayPal()


@pytest.fixture
def rest_client(paypal_config, stub):
    return PayPalRestClient(paypal_config, transport=stub.transport)


@pytest.fixture
def api_client(app_config, rest_client):
    app.dependency_overrides[get_app_config] = lambda: app_config
    app.dependency_overrides[get_gateway] = lambda: rest_client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
