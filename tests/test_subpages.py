def test_subpage_lifecycle(client):
    res = client.post("/api/subpages", json={"name": "About"})
    assert res.status_code == 201
    subpage = res.json()
    assert subpage["name"] == "About"

    res = client.put(f"/api/subpages/{subpage['id']}", json={"name": "About us"})
    assert res.status_code == 200
    assert res.json()["name"] == "About us"

    assert [s["name"] for s in client.get("/api/subpages").json()] == ["About us"]

    res = client.delete(f"/api/subpages/{subpage['id']}")
    assert res.json() == {"message": "Subpage deleted"}
    assert client.get("/api/subpages").json() == []


def test_subpage_requires_name(client):
    res = client.post("/api/subpages", json={})
    assert res.status_code == 400
    assert "name" in res.json()["details"]


def test_update_subpage_requires_name(client):
    subpage = client.post("/api/subpages", json={"name": "FAQ"}).json()
    res = client.put(f"/api/subpages/{subpage['id']}", json={"title": "FAQ"})
    assert res.status_code == 400


def test_unknown_subpage(client):
    missing = "0" * 24
    assert client.put(f"/api/subpages/{missing}", json={"name": "x"}).status_code == 404
    assert client.delete(f"/api/subpages/{missing}").status_code == 404
    assert client.delete("/api/subpages/bogus").json() == {"error": "Subpage not found"}
