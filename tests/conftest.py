import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# api.py creates its default store on import; keep it out of the source tree.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="toefl-prep-"))

import api  # noqa: E402
import storage  # noqa: E402


@pytest.fixture
def store(tmp_path):
    return storage.JsonStore(tmp_path / "data")


@pytest.fixture
def app_store(store):
    api.app.dependency_overrides[api.get_store] = lambda: store
    yield store
    api.app.dependency_overrides.clear()


@pytest.fixture
def make_client(app_store):
    def _make(username=None, password="secret", admin=False):
        client = TestClient(api.app)
        if username:
            r = client.post("/api/register", json={"username": username, "password": password})
            assert r.status_code == 201, r.text
            if admin:
                storage.set_user_as_admin(app_store, r.json()["id"])
        return client

    return _make
