"""Request helpers shared by the API tests."""

from __future__ import annotations

from fastapi.testclient import TestClient


def make_hive(client: TestClient, headers: dict[str, str], name: str = "Apiary 1") -> dict:
    resp = client.post(
        "/hives",
        json={"name": name, "structureType": "Langstroth", "colonySize": 40000},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def make_queen(client: TestClient, name: str = "Beatrix") -> dict:
    resp = client.post("/queens", json={"name": name, "species": "Apis mellifera", "age": 14})
    assert resp.status_code == 201, resp.text
    return resp.json()


def collect_pages(client: TestClient, url: str, key: str, headers: dict[str, str] | None = None) -> list[dict]:
    """Follow ``next`` links from *url*, returning every page body in order."""
    pages = []
    while url is not None:
        resp = client.get(url, headers=headers or {})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert key in body
        pages.append(body)
        url = body.get("next")
    return pages
