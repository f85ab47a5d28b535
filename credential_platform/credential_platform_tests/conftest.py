"""
Pytest configuration for the credential service tests.

Points the service at a throwaway SQLite file and upload directory, and
lowers the bcrypt cost, before any application module is imported.
"""
import os
import tempfile

_tmp_dir = tempfile.mkdtemp(prefix="credential_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "uploads")
os.environ["LOG_DIR"] = os.path.join(_tmp_dir, "logs")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_CONNECT_ATTEMPTS"] = "1"

import pytest
from fastapi.testclient import TestClient

from credential_platform.credential_platform.credential_service.main import app
from credential_platform.credential_platform.credential_service.db import Base
from credential_platform.credential_platform.credential_service.schema import ensure_schema


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def engine(client):
    return client.app.state.engine


@pytest.fixture(autouse=True)
def reset_database(client):
    # Drop all tables and recreate them before each test
    engine = client.app.state.engine
    Base.metadata.drop_all(bind=engine)
    ensure_schema(engine)


@pytest.fixture
def db_session(client):
    session = client.app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def upload_dir():
    return os.environ["UPLOAD_DIR"]
