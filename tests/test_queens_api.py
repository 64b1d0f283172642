from __future__ import annotations

from tests.support import collect_pages, make_queen

QUEEN_BODY = {"name": "Beatrix", "species": "Apis mellifera", "age": 14}


def test_create_queen(client) -> None:
    resp = client.post("/queens", json=QUEEN_BODY)

    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Beatrix"
    assert body["species"] == "Apis mellifera"
    assert body["age"] == 14
    assert body["hive"] is None
    assert body["self"] == f"http://testserver/queens/{body['id']}"


def test_create_queen_needs_no_credential_but_validates(client) -> None:
    resp = client.post("/queens", json={**QUEEN_BODY, "species": "Apis-mellifera"})

    assert resp.status_code == 400
    assert "species" in resp.json()["Error"]


def test_create_queen_requires_json(client) -> None:
    resp = client.post("/queens", content="name=Beatrix", headers={"Content-Type": "text/plain"})

    assert resp.status_code == 415


def test_create_queen_refuses_non_json_accept(client) -> None:
    resp = client.post("/queens", json=QUEEN_BODY, headers={"Accept": "text/html"})

    assert resp.status_code == 406


def test_get_queen(client) -> None:
    queen = make_queen(client)

    resp = client.get(f"/queens/{queen['id']}")

    assert resp.status_code == 200
    assert resp.json() == queen


def test_get_missing_queen_is_404(client) -> None:
    resp = client.get("/queens/4242")

    assert resp.status_code == 404
    assert resp.json() == {"Error": "queen not found"}


def test_non_integer_id_is_400(client) -> None:
    assert client.get("/queens/abc").status_code == 400


def test_put_replaces_queen(client) -> None:
    queen = make_queen(client)

    resp = client.put(
        f"/queens/{queen['id']}",
        json={"name": "Cleo", "species": "Apis cerana", "age": 3},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == queen["self"]
    assert resp.json()["name"] == "Cleo"
    assert client.get(f"/queens/{queen['id']}").json()["species"] == "Apis cerana"


def test_put_missing_queen_is_404(client) -> None:
    resp = client.put("/queens/4242", json=QUEEN_BODY, follow_redirects=False)

    assert resp.status_code == 404


def test_patch_queen(client) -> None:
    queen = make_queen(client)

    resp = client.patch(f"/queens/{queen['id']}", json={"age": 20})

    assert resp.status_code == 200
    assert resp.json()["age"] == 20
    assert resp.json()["name"] == "Beatrix"


def test_patch_rejects_negative_age(client) -> None:
    queen = make_queen(client)

    resp = client.patch(f"/queens/{queen['id']}", json={"age": -1})

    assert resp.status_code == 400
    assert client.get(f"/queens/{queen['id']}").json()["age"] == 14


def test_delete_queen(client) -> None:
    queen = make_queen(client)

    assert client.delete(f"/queens/{queen['id']}").status_code == 204
    assert client.get(f"/queens/{queen['id']}").status_code == 404
    assert client.delete(f"/queens/{queen['id']}").status_code == 404


def test_queen_listing_pages(client) -> None:
    for i in range(7):
        make_queen(client, name=f"Queen {i}")

    pages = collect_pages(client, "/queens", "queens")

    assert [len(page["queens"]) for page in pages] == [5, 2]
    assert all(page["total"] == 7 for page in pages)
    assert pages[0]["next"].startswith("http://testserver/queens?cursor=")


def test_queen_methods_not_allowed(client) -> None:
    resp = client.delete("/queens")
    assert resp.status_code == 405
    assert resp.headers["accept"] == "GET, POST"

    resp = client.post("/queens/1", json=QUEEN_BODY)
    assert resp.status_code == 405
    assert resp.headers["accept"] == "GET, PUT, DELETE, PATCH"


def test_out_of_range_queen_id_is_400(client) -> None:
    assert client.get("/queens/99999999999999999999").status_code == 400
    assert client.delete("/queens/99999999999999999999").status_code == 400
    assert client.patch("/queens/99999999999999999999", json={"age": 2}).status_code == 400


def test_age_must_be_a_json_integer(client) -> None:
    for value in (True, "14", 2**31):
        resp = client.post("/queens", json={**QUEEN_BODY, "age": value})
        assert resp.status_code == 400, value
        assert "age" in resp.json()["Error"]

    assert client.get("/queens").json()["total"] == 0
