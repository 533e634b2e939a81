import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from socialsphere.app import create_app
from socialsphere.config import Settings
from socialsphere.infra.document_store import DocumentStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """In-memory store, throwaway upload directory, fixed secret."""
    return Settings(
        secret_key="test-secret",
        db_path=None,
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture()
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def register(client: TestClient, **overrides):
    form = {
        "username": "alice",
        "name": "Alice",
        "email": "a@x.com",
        "age": "30",
        "password": "p",
    }
    form.update(overrides)
    return client.post("/register", data=form, follow_redirects=False)


@pytest.fixture()
def logged_in(client):
    """A client holding the session cookie of a freshly registered user."""
    r = register(client)
    assert r.status_code == 303
    return client
