from __future__ import annotations

from tests.support import collect_pages, make_hive, make_queen

HIVE_BODY = {"name": "Apiary 1", "structureType": "Langstroth", "colonySize": 40000}


def test_create_hive_returns_representation(client, auth) -> None:
    resp = client.post("/hives", json=HIVE_BODY, headers=auth("alice"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Apiary 1"
    assert body["structureType"] == "Langstroth"
    assert body["colonySize"] == 40000
    assert body["owner"] == "alice"
    assert body["queen"] is None
    assert body["self"] == f"http://testserver/hives/{body['id']}"


def test_create_hive_rejects_invalid_characters(client, auth) -> None:
    resp = client.post("/hives", json={**HIVE_BODY, "name": "Apiary#1"}, headers=auth("alice"))

    assert resp.status_code == 400
    assert "name" in resp.json()["Error"]
    assert client.get("/hives", headers=auth("alice")).json()["total"] == 0


def test_create_hive_requires_every_attribute(client, auth) -> None:
    resp = client.post("/hives", json={"name": "Apiary 1"}, headers=auth("alice"))

    assert resp.status_code == 400
    assert resp.json() == {
        "Error": "The request object is missing at least one of the required attributes"
    }


def test_create_hive_rejects_non_integer_colony_size(client, auth) -> None:
    resp = client.post("/hives", json={**HIVE_BODY, "colonySize": "lots"}, headers=auth("alice"))

    assert resp.status_code == 400
    assert "colonySize" in resp.json()["Error"]


def test_create_hive_requires_json_content_type(client, auth) -> None:
    headers = {**auth("alice"), "Content-Type": "text/plain"}
    resp = client.post("/hives", content="name=Apiary 1", headers=headers)

    assert resp.status_code == 415


def test_create_hive_rejects_malformed_json(client, auth) -> None:
    headers = {**auth("alice"), "Content-Type": "application/json"}
    resp = client.post("/hives", content="{not json", headers=headers)

    assert resp.status_code == 400


def test_missing_credential_is_401(client) -> None:
    resp = client.post("/hives", json=HIVE_BODY)

    assert resp.status_code == 401
    assert resp.json() == {"Error": "missing credential"}
    assert resp.headers["www-authenticate"] == "Bearer"


def test_invalid_credential_is_401(client) -> None:
    resp = client.get("/hives", headers={"Authorization": "Bearer forged.token.value"})

    assert resp.status_code == 401
    assert resp.json() == {"Error": "invalid credential"}


def test_token_from_another_issuer_secret_is_401(client, auth) -> None:
    from apiary.identity import IdentityVerifier

    foreign = IdentityVerifier(secret="not-the-test-secret").create_token("alice")
    resp = client.get("/hives", headers={"Authorization": f"Bearer {foreign}"})

    assert resp.status_code == 401


def test_get_hive_owner_only(client, auth) -> None:
    hive = make_hive(client, auth("alice"))

    assert client.get(f"/hives/{hive['id']}", headers=auth("alice")).status_code == 200

    resp = client.get(f"/hives/{hive['id']}", headers=auth("bob"))
    assert resp.status_code == 403
    assert resp.json() == {"Error": "different owner"}


def test_other_owner_cannot_mutate_hive(client, auth) -> None:
    hive = make_hive(client, auth("alice"))
    url = f"/hives/{hive['id']}"
    bob = auth("bob")

    assert client.put(url, json=HIVE_BODY, headers=bob, follow_redirects=False).status_code == 403
    assert client.patch(url, json={"name": "Stolen"}, headers=bob).status_code == 403
    assert client.delete(url, headers=bob).status_code == 403

    after = client.get(url, headers=auth("alice")).json()
    assert after["name"] == "Apiary 1"


def test_missing_hive_is_404(client, auth) -> None:
    resp = client.get("/hives/9999", headers=auth("alice"))

    assert resp.status_code == 404
    assert resp.json() == {"Error": "hive not found"}


def test_get_hive_refuses_non_json_accept(client, auth) -> None:
    hive = make_hive(client, auth("alice"))
    headers = {**auth("alice"), "Accept": "text/html"}

    assert client.get(f"/hives/{hive['id']}", headers=headers).status_code == 406


def test_put_replaces_attributes_and_keeps_queen(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)
    queen = make_queen(client)
    assert client.put(f"/hives/{hive['id']}/queens/{queen['id']}", headers=alice).status_code == 204

    resp = client.put(
        f"/hives/{hive['id']}",
        json={"name": "North Yard", "structureType": "Top Bar", "colonySize": 12000},
        headers=alice,
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == hive["self"]
    body = resp.json()
    assert body["name"] == "North Yard"
    assert body["structureType"] == "Top Bar"
    assert body["colonySize"] == 12000
    assert body["queen"]["id"] == queen["id"]


def test_put_requires_every_attribute(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)

    resp = client.put(f"/hives/{hive['id']}", json={"name": "North Yard"}, headers=alice)

    assert resp.status_code == 400


def test_patch_updates_only_given_attributes(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)

    resp = client.patch(f"/hives/{hive['id']}", json={"colonySize": 55000}, headers=alice)

    assert resp.status_code == 200
    body = resp.json()
    assert body["colonySize"] == 55000
    assert body["name"] == "Apiary 1"
    assert body["structureType"] == "Langstroth"


def test_patch_validates_given_attributes(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)

    resp = client.patch(f"/hives/{hive['id']}", json={"structureType": "Box & Frames"}, headers=alice)

    assert resp.status_code == 400
    assert client.get(f"/hives/{hive['id']}", headers=alice).json()["structureType"] == "Langstroth"


def test_patch_requires_json_content_type(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)
    headers = {**alice, "Content-Type": "text/plain"}

    assert client.patch(f"/hives/{hive['id']}", content="x", headers=headers).status_code == 415


def test_delete_hive(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)

    assert client.delete(f"/hives/{hive['id']}", headers=alice).status_code == 204
    assert client.get(f"/hives/{hive['id']}", headers=alice).status_code == 404
    assert client.delete(f"/hives/{hive['id']}", headers=alice).status_code == 404


def test_collection_methods_not_allowed(client, auth) -> None:
    for method in ("put", "patch", "delete"):
        resp = client.request(method.upper(), "/hives", headers=auth("alice"))
        assert resp.status_code == 405
        assert resp.headers["accept"] == "GET, POST"
        assert "Error" in resp.json()

    resp = client.post("/hives/1", json=HIVE_BODY, headers=auth("alice"))
    assert resp.status_code == 405
    assert resp.headers["accept"] == "GET, PUT, DELETE, PATCH"


def test_listing_is_paginated_and_owner_scoped(client, auth) -> None:
    alice = auth("alice")
    bob = auth("bob")
    alice_ids = {make_hive(client, alice, name=f"Alice {i}")["id"] for i in range(12)}
    for i in range(3):
        make_hive(client, bob, name=f"Bob {i}")

    pages = collect_pages(client, "/hives", "hives", headers=alice)

    assert [len(page["hives"]) for page in pages] == [5, 5, 2]
    assert all(page["total"] == 12 for page in pages)
    assert "next" not in pages[-1]
    listed = [hive["id"] for page in pages for hive in page["hives"]]
    assert len(listed) == len(set(listed))
    assert set(listed) == alice_ids
    assert all(hive["owner"] == "alice" for page in pages for hive in page["hives"])


def test_next_link_points_back_at_collection(client, auth) -> None:
    alice = auth("alice")
    for i in range(6):
        make_hive(client, alice, name=f"Hive {i}")

    first = client.get("/hives", headers=alice).json()

    assert first["next"].startswith("http://testserver/hives?cursor=")


def test_empty_listing(client, auth) -> None:
    body = client.get("/hives", headers=auth("carol")).json()

    assert body == {"hives": [], "total": 0}


def test_invalid_cursor_is_400(client, auth) -> None:
    resp = client.get("/hives", params={"cursor": "@@@"}, headers=auth("alice"))

    assert resp.status_code == 400
    assert resp.json() == {"Error": "invalid cursor"}


def test_out_of_range_hive_id_is_400(client, auth) -> None:
    alice = auth("alice")

    for hive_id in ("99999999999999999999", "2147483648", "0"):
        resp = client.get(f"/hives/{hive_id}", headers=alice)
        assert resp.status_code == 400, hive_id
        assert resp.json() == {"Error": "The request has invalid parameters"}

    assert client.delete("/hives/99999999999999999999", headers=alice).status_code == 400


def test_largest_hive_id_is_404(client, auth) -> None:
    resp = client.get("/hives/2147483647", headers=auth("alice"))

    assert resp.status_code == 404


def test_colony_size_must_be_a_json_integer(client, auth) -> None:
    alice = auth("alice")

    for value in (True, "12", 12.5, 2**31):
        resp = client.post("/hives", json={**HIVE_BODY, "colonySize": value}, headers=alice)
        assert resp.status_code == 400, value
        assert "colonySize" in resp.json()["Error"]

    assert client.get("/hives", headers=alice).json()["total"] == 0


def test_patch_colony_size_must_be_a_json_integer(client, auth) -> None:
    alice = auth("alice")
    hive = make_hive(client, alice)

    resp = client.patch(f"/hives/{hive['id']}", json={"colonySize": "55000"}, headers=alice)

    assert resp.status_code == 400
    assert client.get(f"/hives/{hive['id']}", headers=alice).json()["colonySize"] == 40000
