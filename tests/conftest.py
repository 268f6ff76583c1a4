import os
import tempfile

# Keep the app away from real files and servers while tests import it
os.environ["STORE_BACKEND"] = "json"
os.environ["DATA_DB_PATH"] = ""
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="picvote-uploads-"))

import pytest

from picvote import config
from picvote.database import set_store
from picvote.security import create_access_token
from picvote.storage import JsonStore
from picvote.vote_service import VoteService


@pytest.fixture
def store():
    return JsonStore()


@pytest.fixture
def service(store):
    return VoteService(store)


@pytest.fixture
def candidate(service):
    return service.add_candidate("Sunset", "Photo of the beach", "/uploads/sunset.jpg", is_admin=True)


@pytest.fixture
def client(store, tmp_path, monkeypatch):
    from fastapi.testclient import TestClient
    from picvote.main import app

    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))
    set_store(store)
    with TestClient(app) as test_client:
        yield test_client
    set_store(None)


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin-id", "email": "admin@example.com"})
    return {"Authorization": f"Bearer {token}"}
