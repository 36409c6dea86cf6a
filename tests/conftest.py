from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import tumana.persistence.db as db
from tumana.client.backend import TumanaBackendClient
from tumana.core.config import get_settings
from tumana.core.security import get_optional_session, get_session_context
from tumana.core.session import MemoryTokenStore, SessionContext
from tumana.persistence.models import Base

Responder = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Route table standing in for the Digital Tumana REST backend."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status_code: int = 200, json: Any = None) -> None:
        self.routes[(method.upper(), path)] = (status_code, json)

    def on_call(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method.upper(), path)] = responder

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route for {request.method} {request.url.path}"})
        if callable(route):
            return route(request)
        status_code, body = route
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite"


@pytest.fixture(scope="session", autouse=True)
def configure_test_engine(test_db_path: Path):
    settings = get_settings()
    settings.shuffle_marketplace = False

    engine = create_engine(
        f"sqlite+pysqlite:///{test_db_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    db.engine = engine
    db.SessionLocal = TestSessionLocal

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def make_client(backend: FakeBackend):
    def _make(token: str | None = "tok-123") -> TumanaBackendClient:
        session = SessionContext(MemoryTokenStore())
        if token:
            session.remember(token)
        return TumanaBackendClient(session, get_settings(), transport=backend.transport)

    return _make


@pytest.fixture()
def api(backend: FakeBackend):
    from tumana.api.deps import get_backend_client, get_public_backend_client
    from tumana.main import app

    def _client(session: SessionContext = Depends(get_session_context)) -> TumanaBackendClient:
        return TumanaBackendClient(session, get_settings(), transport=backend.transport)

    def _public_client(session: SessionContext = Depends(get_optional_session)) -> TumanaBackendClient:
        return TumanaBackendClient(session, get_settings(), transport=backend.transport)

    app.dependency_overrides[get_backend_client] = _client
    app.dependency_overrides[get_public_backend_client] = _public_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer tok-123"}
