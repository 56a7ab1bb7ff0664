import os
import tempfile
from pathlib import Path

_tmp = Path(tempfile.mkdtemp(prefix="artemia-shop-"))
os.environ["UPLOAD_DIR"] = str(_tmp / "uploads")
os.environ["PUBLIC_DIR"] = str(_tmp / "public")
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "secret"
os.environ["TRACKING_API_TOKEN"] = "test-token"

(_tmp / "public").mkdir()
(_tmp / "public" / "index.html").write_text("<html>storefront</html>")
(_tmp / "public" / "admin.html").write_text("<html>admin</html>")

import httpx
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from database import Store, get_store
from fetch import get_http_client
from main import app


class Upstream:
    """Canned responses for outbound requests, keyed by URL without query."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="no route")
        return route(request)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return Store(AsyncMongoMockClient()["artemia-shop-test"])


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def overrides(store, upstream):
    async def override_store():
        return store

    async def override_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as c:
            yield c

    app.dependency_overrides[get_store] = override_store
    app.dependency_overrides[get_http_client] = override_http_client
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    return TestClient(app)
