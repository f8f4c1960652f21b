"""Tests for the HTTP surface: routers, error envelope, and request IDs."""

import httpx
import pytest
from fastapi.testclient import TestClient

from icon_resolver.config.settings import IconResolverSettings
from icon_resolver.integration.api_client import IconApiClient
from icon_resolver.main import create_app
from icon_resolver.services.icon_service import IconService

BODY = "<path d='M1 1'/>"


def upstream(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/nope.json":
        return httpx.Response(200, json=404)
    wanted = request.url.params.get("icons", "").split(",")
    icons = {name: {"body": BODY, "width": 24} for name in wanted if name == "home"}
    return httpx.Response(200, json={"prefix": "mdi", "icons": icons})


@pytest.fixture
def service(registry, storage) -> IconService:
    registry.set_config("", {"resources": ["https://api.test"], "rotate": 50, "timeout": 1000})
    client = IconApiClient(httpx.AsyncClient(transport=httpx.MockTransport(upstream)))
    return IconService(storage=storage, registry=registry, api_client=client)


@pytest.fixture
def client(service):
    with TestClient(create_app(IconResolverSettings(), icon_service=service)) as test_client:
        yield test_client


class TestIconEndpoints:
    def test_get_icon_loads_from_api(self, client):
        response = client.get("/api/v1/icons/mdi:home")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["body"] == BODY
        assert body["data"]["width"] == 24
        assert body["data"]["hFlip"] is False

    def test_get_missing_icon(self, client):
        response = client.get("/api/v1/icons/mdi:gone")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Icon 'mdi:gone' not found"
        assert body["meta"] == {"name": "mdi:gone"}

    def test_unknown_prefix(self, client):
        assert client.get("/api/v1/icons/nope:home").status_code == 404

    def test_invalid_name(self, client):
        response = client.get("/api/v1/icons/Not_Valid")
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid icon name"

    def test_exists_does_not_fetch(self, client):
        response = client.get("/api/v1/icons/mdi:home/exists")
        assert response.json()["data"] == {"name": "mdi:home", "exists": False}

        client.get("/api/v1/icons/mdi:home")
        response = client.get("/api/v1/icons/mdi:home/exists")
        assert response.json()["data"]["exists"] is True

    def test_list_icons(self, client):
        client.post("/api/v1/collections", json={"prefix": "fa", "icons": {"star": {"body": BODY}}})
        response = client.get("/api/v1/icons", params={"provider": "", "prefix": "fa"})
        assert response.json()["data"] == {"provider": "", "prefix": "fa", "icons": ["star"]}

    def test_list_all_icons_qualified(self, client):
        client.post("/api/v1/collections", json={"prefix": "fa", "icons": {"star": {"body": BODY}}})
        response = client.get("/api/v1/icons")
        assert response.json()["data"]["icons"] == ["fa:star"]


class TestCollectionEndpoint:
    def test_add_collection(self, client):
        payload = {"prefix": "fa", "icons": {"star": {"body": BODY}}}
        response = client.post("/api/v1/collections", json=payload, params={"provider": "local"})
        assert response.status_code == 200
        assert response.json()["data"] == {"provider": "local", "prefix": "fa", "added": True}
        assert client.get("/api/v1/icons/@local:fa:star/exists").json()["data"]["exists"] is True

    def test_rejected_collection(self, client):
        response = client.post("/api/v1/collections", json={"prefix": "Bad", "icons": {}})
        assert response.status_code == 422
        assert response.json()["meta"] == {"prefix": "Bad"}

    def test_non_object_body(self, client):
        response = client.post("/api/v1/collections", json=["fa"])
        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"


class TestProviderEndpoints:
    def test_default_provider_alias(self, client):
        response = client.get("/api/v1/providers/_")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["resources"] == ["https://api.test"]
        assert data["maxURL"] == 500

    def test_unknown_provider(self, client):
        response = client.get("/api/v1/providers/nowhere")
        assert response.status_code == 404
        assert response.json()["meta"] == {"provider": "nowhere"}

    def test_put_provider(self, client):
        response = client.put(
            "/api/v1/providers/local",
            json={"resources": ["http://localhost:3000"], "maxURL": 800},
        )
        assert response.status_code == 200
        assert response.json()["data"]["maxURL"] == 800
        assert client.get("/api/v1/providers/local").json()["data"]["rotate"] == 750

    def test_put_provider_without_hosts(self, client):
        response = client.put("/api/v1/providers/local", json={"rotate": 100})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid provider config"

    def test_put_provider_bad_types(self, client):
        response = client.put("/api/v1/providers/local", json={"resources": "x", "rotate": -1})
        assert response.status_code == 422
        assert "fields" in response.json()["meta"]


class TestHealthEndpoints:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["data"]["status"] == "healthy"
        assert body["data"]["providers"] == [""]
        assert body["data"]["storage"]["icons"] == 0

    def test_readiness(self, client):
        response = client.get("/readiness")
        assert response.status_code == 200
        assert response.json()["data"] == {"ready": True}

    def test_not_ready_without_default_provider(self, registry, storage):
        service = IconService(storage=storage, registry=registry)
        with TestClient(create_app(IconResolverSettings(), icon_service=service)) as client:
            response = client.get("/readiness")
        assert response.status_code == 503
        assert response.json()["error"] == "Default provider not configured"


class TestRequestId:
    def test_generated(self, client):
        assert client.get("/health").headers["X-Request-ID"]

    def test_propagated(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


def test_unhandled_error_returns_envelope(service, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(service, "list_icons", explode)
    app = create_app(IconResolverSettings(), icon_service=service)
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/api/v1/icons")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "data": None,
        "error": "Internal server error",
        "meta": None,
    }
