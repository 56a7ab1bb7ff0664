import base64
from pathlib import Path

import pytest


def basic(username, password):
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


def test_admin_requires_credentials(client):
    res = client.get("/admin")
    assert res.status_code == 401
    assert res.json() == {"error": "Admin credentials required"}
    assert res.headers["www-authenticate"] == 'Basic realm="admin"'


@pytest.mark.parametrize("header", [basic("admin", "nope"), basic("root", "secret"), "secret"])
def test_admin_rejects_wrong_credentials(client, header):
    assert client.get("/admin", headers={"Authorization": header}).status_code == 401


def test_admin_with_credentials(client):
    res = client.get("/admin", headers={"Authorization": basic("admin", "secret")})
    assert res.status_code == 200
    assert "admin" in res.text


def test_admin_closed_without_password(client, monkeypatch):
    from config import settings

    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")
    res = client.get("/admin", headers={"Authorization": basic("admin", "")})
    assert res.status_code == 401


def test_gate_does_not_cover_api(client):
    assert client.get("/api/products").status_code == 200


def test_storefront_fallback(client):
    for path in ("/", "/products/42", "/checkout"):
        res = client.get(path)
        assert res.status_code == 200
        assert "storefront" in res.text


def test_unknown_api_route(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"error": "Route not found"}


def test_missing_upload(client):
    res = client.get("/uploads/does-not-exist.png")
    assert res.status_code == 404
    assert "error" in res.json()


def test_diagnostics(client):
    client.post("/api/subpages", json={"name": "About"})
    body = client.get("/api/test").json()
    assert body["database"] == "✅ Available"
    assert "subpages" in body["collections"]


@pytest.fixture
def stylesheet():
    from config import settings

    path = Path(settings.PUBLIC_DIR) / "app.css"
    path.write_text("body { color: teal; }")
    yield path
    path.unlink()


def test_public_assets_are_served(client, stylesheet):
    res = client.get("/app.css")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/css")
    assert res.text == "body { color: teal; }"


def test_admin_document_not_served_as_asset(client):
    res = client.get("/admin.html")
    assert res.status_code == 200
    assert "storefront" in res.text


@pytest.mark.parametrize("method", ["post", "put", "delete", "patch"])
def test_unknown_api_route_any_method(client, method):
    res = getattr(client, method)("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"error": "Route not found"}
