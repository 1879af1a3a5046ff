import pytest
from fastapi.testclient import TestClient

from tasktracker.main import create_app
from tasktracker.services.counters import IdCounters
from tasktracker.services.users import UserRegistry
from tasktracker.store import JsonStore


# Fresh data directory (and so a fresh working set) for each test
@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def app(data_dir):
    return create_app(str(data_dir))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def store(data_dir):
    return JsonStore(data_dir)


@pytest.fixture
def counters(store):
    return IdCounters(store)


@pytest.fixture
def registry(store, counters):
    return UserRegistry(store, counters)


def register_and_login(client, name, email, password="Pass123!"):
    """Register a user and open a session; return (user, auth headers)."""
    r = client.post("/users", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201
    r2 = client.post("/sessions", json={"email": email, "password": password})
    assert r2.status_code == 201
    return r.json(), {"Authorization": f"Bearer {r2.json()['token']}"}
