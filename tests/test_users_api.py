from __future__ import annotations

PROFILE = {"firstName": "Ada", "lastName": "Lovelace"}


def test_register_creates_beekeeper(client, auth) -> None:
    resp = client.post("/users", json=PROFILE, headers=auth("google-oauth2-1"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["subjectId"] == "google-oauth2-1"
    assert body["firstName"] == "Ada"
    assert body["lastName"] == "Lovelace"


def test_register_is_idempotent(client, auth) -> None:
    headers = auth("google-oauth2-1")
    first = client.post("/users", json=PROFILE, headers=headers)

    second = client.post("/users", json={"firstName": "Other", "lastName": "Name"}, headers=headers)

    assert second.status_code == 200
    assert second.json() == first.json()
    assert len(client.get("/users").json()["users"]) == 1


def test_register_requires_credential(client) -> None:
    resp = client.post("/users", json=PROFILE)

    assert resp.status_code == 401


def test_register_validates_names(client, auth) -> None:
    resp = client.post("/users", json={"firstName": "Ada!", "lastName": "Lovelace"}, headers=auth("x"))

    assert resp.status_code == 400
    assert "firstName" in resp.json()["Error"]


def test_list_users(client, auth) -> None:
    client.post("/users", json=PROFILE, headers=auth("one"))
    client.post("/users", json={"firstName": "Grace", "lastName": "Hopper"}, headers=auth("two"))

    resp = client.get("/users")

    assert resp.status_code == 200
    assert [user["subjectId"] for user in resp.json()["users"]] == ["one", "two"]


def test_users_collection_methods_not_allowed(client) -> None:
    resp = client.patch("/users", json=PROFILE)

    assert resp.status_code == 405
    assert resp.headers["accept"] == "GET, POST"


def test_health(client) -> None:
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "apiary"}
