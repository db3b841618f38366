import os
import tempfile

# Settings are read at import time, so point them at throwaway locations first
_TMP = tempfile.mkdtemp(prefix="charity-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["BACKUP_DIR"] = os.path.join(_TMP, "backups")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from charity_records.database import create_db_and_tables
from charity_records.main import app
from charity_records.seed import default_document
from charity_records.store import DocumentStore


@pytest.fixture
def document():
    return default_document()


@pytest.fixture
def store(document):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_db_and_tables(engine)
    store = DocumentStore(engine=engine)
    store.commit(document)
    return store


@pytest.fixture
def client(store):
    with TestClient(app) as c:
        app.state.store = store
        yield c


@pytest.fixture
def manager_client(client):
    response = client.post("/login", data={"username": "Admin", "password": "Admin"})
    assert response.status_code == 200
    return client
