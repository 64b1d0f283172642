from __future__ import annotations

from typing import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apiary.config import Settings
from apiary.identity import IdentityVerifier
from apiary.server.main import create_app

TEST_SECRET = "test-secret"
TEST_AUDIENCE = "apiary-tests"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'apiary.sqlite'}",
        create_schema=True,
        identity_secret=TEST_SECRET,
        identity_audience=TEST_AUDIENCE,
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def verifier(app: FastAPI) -> IdentityVerifier:
    return app.state.identity_verifier


@pytest.fixture()
def auth(verifier: IdentityVerifier) -> Callable[[str], dict[str, str]]:
    """Return a function building Authorization headers for a subject."""

    def _headers(subject: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {verifier.create_token(subject)}"}

    return _headers

