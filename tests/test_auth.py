import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from tasktracker.errors import AuthFailure, HashingError, ValidationError
from conftest import register_and_login


def test_register_and_login_success(client):
    r = client.post("/users", json={"name": "Ana", "email": "ana@example.com", "password": "correct_horse"})
    assert r.status_code == 201
    data = r.json()
    assert data == {"id": 1, "name": "Ana", "email": "ana@example.com"}

    r2 = client.post("/sessions", json={"email": "ana@example.com", "password": "correct_horse"})
    assert r2.status_code == 201
    session = r2.json()
    assert session["userId"] == 1
    assert session["displayName"] == "Ana"
    assert len(session["token"]) == 128
    int(session["token"], 16)
    assert "createdAt" in session


def test_password_is_never_stored_or_returned(client, data_dir):
    password = "s3cret-Passw0rd"
    r = client.post("/users", json={"name": "Ana", "email": "ana@example.com", "password": password})
    assert "password" not in r.text
    assert "passwordHash" not in r.json()

    stored = json.loads((data_dir / "users.json").read_text(encoding="utf-8"))
    assert len(stored) == 1
    assert stored[0]["passwordHash"].startswith("$argon2id$")
    assert password not in json.dumps(stored)


def test_verify_succeeds_only_with_registered_password(registry):
    registry.register("Ana", "ana@example.com", "right")
    user = registry.verify("ana@example.com", "right")
    assert user == {"id": 1, "name": "Ana", "email": "ana@example.com"}

    with pytest.raises(AuthFailure):
        registry.verify("ana@example.com", "wrong")


def test_login_does_not_reveal_which_credential_failed(client):
    client.post("/users", json={"name": "Ana", "email": "ana@example.com", "password": "right"})

    wrong_password = client.post("/sessions", json={"email": "ana@example.com", "password": "wrong"})
    unknown_email = client.post("/sessions", json={"email": "nobody@example.com", "password": "right"})
    assert wrong_password.status_code == 400
    assert unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json()


def test_duplicate_email_is_rejected(client):
    r = client.post("/users", json={"name": "Ana", "email": "ana@example.com", "password": "p"})
    assert r.status_code == 201

    r = client.post("/users", json={"name": "Other", "email": "ANA@example.com", "password": "q"})
    assert r.status_code == 400
    assert "exists" in r.json()["detail"].lower()


def test_duplicate_email_does_not_consume_an_id(registry):
    registry.register("Ana", "ana@example.com", "p")
    with pytest.raises(ValidationError):
        registry.register("Ana", "ana@example.com", "p")
    assert registry.register("Bob", "bob@example.com", "p")["id"] == 2


def test_register_input_validation(client):
    # missing email
    r = client.post("/users", json={"name": "Ana", "password": "p"})
    assert r.status_code == 400

    r = client.post("/users", json={"name": "Ana", "email": "not_an_email", "password": "p"})
    assert r.status_code == 400

    r = client.post("/users", json={"name": "  ", "email": "ana@example.com", "password": "p"})
    assert r.status_code == 400

    r = client.post("/users", json={"name": "Ana", "email": "ana@example.com", "password": ""})
    assert r.status_code == 400


def test_hashing_failure_stores_nothing(registry, store, counters, monkeypatch):
    def broken_hash(password):
        raise HashingError()

    monkeypatch.setattr("tasktracker.services.users.hash_password", broken_hash)

    with pytest.raises(HashingError):
        registry.register("Ana", "ana@example.com", "p")

    assert registry.get(1) is None
    assert counters.last_user_id == 0
    assert store.load("users", None) is None


def test_hashing_failure_over_http_is_a_generic_500(client, monkeypatch):
    def broken_hash(password):
        raise HashingError()

    monkeypatch.setattr("tasktracker.services.users.hash_password", broken_hash)

    r = client.post("/users", json={"name": "Ana", "email": "ana@example.com", "password": "p"})
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}


def test_concurrent_registrations_get_distinct_ids(registry, store):
    def register(i):
        return registry.register(f"user{i}", f"user{i}@example.com", "p")["id"]

    with ThreadPoolExecutor(max_workers=4) as executor:
        ids = list(executor.map(register, range(8)))

    assert sorted(ids) == list(range(1, 9))
    assert store.load("lastIDs", {})["lastUserId"] == 8
    assert len(store.load("users", [])) == 8


def test_login_returns_only_the_new_session(client):
    _, first = register_and_login(client, "Ana", "ana@example.com")
    r = client.post("/sessions", json={"email": "ana@example.com", "password": "Pass123!"})
    assert r.status_code == 201
    body = r.json()
    assert isinstance(body, dict)
    assert first["Authorization"] != f"Bearer {body['token']}"


def test_unknown_email_still_runs_a_hash_check(registry, monkeypatch):
    from tasktracker.utils import auth

    calls = []

    def counting_verify(plain, hashed):
        calls.append(hashed)
        return real_verify(plain, hashed)

    real_verify = auth.pwd_context.verify
    monkeypatch.setattr(auth.pwd_context, "verify", counting_verify)

    registry.register("Ana", "ana@example.com", "right")
    with pytest.raises(AuthFailure):
        registry.verify("nobody@example.com", "right")
    with pytest.raises(AuthFailure):
        registry.verify("ana@example.com", "wrong")

    assert len(calls) == 2
    assert all(h.startswith("$argon2id$") for h in calls)
