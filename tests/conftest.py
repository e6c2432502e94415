"""Shared fixtures: a fresh SQLite database per test."""

import pytest
from fastapi.testclient import TestClient

from core.catalog import SchemaCatalog
from core.config import Settings
from core.executor import CrudExecutor
from core.security import CredentialService, get_password_hash
from database import create_db_engine, create_session_factory, init_db
from main import create_app


SECRET = "test-secret-key"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'minibase.db'}"


@pytest.fixture
def engine(database_url):
    engine = create_db_engine(database_url)
    init_db(engine, ADMIN_PASSWORD, get_password_hash)
    yield engine
    engine.dispose()


@pytest.fixture
def catalog(engine):
    return SchemaCatalog(engine)


@pytest.fixture
def executor(engine, catalog):
    return CrudExecutor(engine, catalog)


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def credentials():
    return CredentialService(SECRET)


@pytest.fixture
def settings(database_url):
    return Settings(
        jwt_secret_key=SECRET,
        database_url=database_url,
        admin_bootstrap_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
    app.state.engine.dispose()


@pytest.fixture
def token(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    return response.json()["data"]["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def lenient_client(settings):
    """Client that returns 500 responses instead of re-raising server errors."""
    app = create_app(settings)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.state.engine.dispose()


@pytest.fixture
def lenient_headers(lenient_client):
    response = lenient_client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}
