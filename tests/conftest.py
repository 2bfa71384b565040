from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import SQLModel, create_engine

import storefront.database as database
from storefront.core.config import Settings
from storefront.models import storage as _storage_models  # noqa: F401

API_PREFIX = "/api/v1"


class MemoryStorage:
    """dict-backed KeyValueStorage for store-level tests."""

    def __init__(self, items: dict[str, str] | None = None):
        self.items = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FakeApi:
    """
    Upstream REST API stand-in, used as an httpx.MockTransport handler.

    Register answers with on(method, path, *responses). Each response is
    a (status, json) tuple, a callable taking the request, or an
    exception instance to raise. Multiple responses are served in order;
    the last one repeats.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list] = {}
        self.calls: list[httpx.Request] = []

    def on(self, method: str, path: str, *responses) -> None:
        self.routes[(method, path)] = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]

        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})
        answer = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(request)
        status_code, body = answer
        return httpx.Response(status_code, json=body)

    def called(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.calls
            if r.method == method and r.url.path == API_PREFIX + path
        ]

    @property
    def call_paths(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path[len(API_PREFIX):]) for r in self.calls]


def make_token(minutes: int = 5, **claims) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"exp": int(exp.timestamp()), **claims}, "test-secret", algorithm="HS256")


def user_payload(is_owner: bool = False, **overrides) -> dict:
    user = {
        "id": 1,
        "username": "jane@example.com",
        "email": "jane@example.com",
        "first_name": "Jane",
        "last_name": "Wanjiku",
        "profile": {"phone_number": "254722123456", "is_owner": is_owner},
    }
    user.update(overrides)
    return user


def product_payload(product_id: int = 7, **overrides) -> dict:
    product = {
        "id": product_id,
        "name": "Brake Pad Set",
        "sku": "BP-001",
        "price": 2000,
        "discount_percentage": 10,
        "stock": 5,
        "primary_image": "https://cdn.example.com/bp-001.jpg",
        "is_active": True,
    }
    product.update(overrides)
    return product


@pytest.fixture()
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture()
def transport(fake_api: FakeApi) -> httpx.MockTransport:
    return httpx.MockTransport(fake_api)


@pytest.fixture()
def api_settings() -> Settings:
    return Settings(API_BASE_URL="http://localhost:8000/api/v1")


@pytest.fixture()
def test_engine(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.sqlite'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(database, "engine", engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def client(test_engine, transport: httpx.MockTransport):
    from storefront.core.auth import get_api_transport
    from storefront.main import app

    app.dependency_overrides[get_api_transport] = lambda: transport
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def login(client: TestClient, fake_api: FakeApi):
    """Log the test browser in; returns the access token used."""

    def _login(is_owner: bool = False) -> str:
        access = make_token(sub="1")
        fake_api.on(
            "POST",
            "/users/token/",
            (200, {"access": access, "refresh": "refresh-1", "user": user_payload(is_owner)}),
        )
        resp = client.post(
            f"{API_PREFIX}/auth/login",
            json={"email": "jane@example.com", "password": "secret123"},
        )
        assert resp.status_code == 200, resp.text
        return access

    return _login
