from __future__ import annotations

import json
from typing import Any, Callable, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from commission_dashboard.api.deps.session import get_upstream_client
from commission_dashboard.core.config import settings
from commission_dashboard.services.commission_proxy import UpstreamCommissionClient

from factories import UPSTREAM_BASE_URL, USERS, make_envelope, session_cookie_for


class UpstreamStub:
    """
    Stands in for the admin API. Set `handler` to control answers; every
    request is recorded in `requests`.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json=make_envelope([])
        )

    def respond_with(self, payload: Any, status_code: int = 200) -> None:
        self.handler = lambda request: httpx.Response(status_code, json=payload)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self, **kwargs: Any) -> UpstreamCommissionClient:
        return UpstreamCommissionClient(
            base_url=UPSTREAM_BASE_URL,
            transport=httpx.MockTransport(self),
            **kwargs,
        )


@pytest.fixture()
def users_file(tmp_path, monkeypatch):
    path = tmp_path / "users.json"
    path.write_text(json.dumps(USERS), encoding="utf-8")
    monkeypatch.setattr(settings, "USERS_FILE", str(path))
    return path


@pytest.fixture()
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture()
def app(users_file, upstream):
    from commission_dashboard.main import create_application

    fastapi_app = create_application()
    fastapi_app.dependency_overrides[get_upstream_client] = lambda: upstream.client(fetch_all_pages=False)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture()
async def admin_client(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, session_cookie_for("a"))
    yield client


@pytest_asyncio.fixture()
async def viewer_client(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, session_cookie_for("viewer"))
    yield client
