from fastapi.testclient import TestClient

from app.features.notes.deps import get_note_store
from app.features.notes.errors import StoreError
from app.main import app


def create(client, **body):
    response = client.post("/api/notes", json=body)
    assert response.status_code == 201, response.json()
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Kloud Notes API"

    health = client.get("/api/health/").json()
    assert health["status"] == "healthy"
    assert health["rate_limiter"] == "InMemoryRateLimiter"

    assert client.get("/api/health/pool").json()["status"] == "not_applicable"


def test_create_and_fetch_unprotected_note(client):
    created = create(client, content="Hello world")

    assert set(created) == {"shortCode", "url", "ownerToken"}
    assert created["url"].endswith(f"/{created['shortCode']}")

    note = client.get(f"/api/notes/{created['shortCode']}").json()
    assert note["content"] == "Hello world"
    assert note["has_password"] is False
    assert note["short_code"] == created["shortCode"]
    assert set(note) == {"id", "short_code", "content", "has_password", "created_at", "updated_at"}


def test_protected_note_flow(client):
    created = create(client, content="secret", password="1234")
    code = created["shortCode"]

    fetched = client.get(f"/api/notes/{code}").json()
    assert fetched["content"] == ""
    assert fetched["has_password"] is True
    assert "password_hash" not in fetched

    ok = client.post("/api/verify", json={"shortCode": code, "password": "1234"})
    assert ok.status_code == 200
    assert ok.json()["valid"] is True
    assert ok.json()["note"]["content"] == "secret"

    bad = client.post("/api/verify", json={"shortCode": code, "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json() == {"valid": False}


def test_verify_error_statuses(client):
    open_note = create(client, content="open")

    missing = client.post("/api/verify", json={"shortCode": "missing1", "password": "1234"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "Note not found"}

    unprotected = client.post("/api/verify", json={"shortCode": open_note["shortCode"], "password": "1234"})
    assert unprotected.status_code == 400
    assert unprotected.json()["error"] == "This note is not password protected"

    malformed = client.post("/api/verify", json={"shortCode": open_note["shortCode"]})
    assert malformed.status_code == 400
    assert malformed.json()["error"] == "Validation failed"


def test_create_validation_errors(client):
    empty = client.post("/api/notes", json={"content": ""})
    assert empty.status_code == 400
    assert empty.json() == {"error": "Validation failed", "message": "Note content cannot be empty"}

    short_password = client.post("/api/notes", json={"content": "x", "password": "12"})
    assert short_password.status_code == 400
    assert "at least 4" in short_password.json()["message"]

    bad_code = client.post("/api/notes", json={"content": "x", "customCode": "no spaces"})
    assert bad_code.status_code == 400

    missing_body = client.post("/api/notes", json={})
    assert missing_body.status_code == 400
    assert missing_body.json()["error"] == "Validation failed"


def test_custom_code_conflict_returns_409(client):
    create(client, content="first", customCode="abc123")

    response = client.post("/api/notes", json={"content": "second", "customCode": "abc123"})

    assert response.status_code == 409
    assert response.json() == {"error": "This custom code is already in use. Please choose another."}
    assert client.get("/api/notes/abc123").json()["content"] == "first"


def test_fetch_missing_note_returns_404(client):
    response = client.get("/api/notes/doesnotexist")

    assert response.status_code == 404
    assert response.json() == {"error": "Note not found"}


def test_update_protected_note(client):
    code = create(client, content="secret", password="1234")["shortCode"]
    before = client.post("/api/verify", json={"shortCode": code, "password": "1234"}).json()["note"]

    denied = client.patch(f"/api/notes/{code}", json={"content": "hacked"})
    assert denied.status_code == 401
    assert denied.json()["error"] == "Invalid password"

    wrong = client.patch(f"/api/notes/{code}", json={"content": "hacked", "password": "0000"})
    assert wrong.status_code == 401

    updated = client.patch(f"/api/notes/{code}", json={"content": "edited", "password": "1234"})
    assert updated.status_code == 200
    assert updated.json()["content"] == "edited"
    assert updated.json()["updated_at"] != before["updated_at"]


def test_update_rotates_and_removes_password(client):
    code = create(client, content="secret", password="1234")["shortCode"]

    rotated = client.patch(f"/api/notes/{code}", json={"password": "1234", "newPassword": "abcd"})
    assert rotated.status_code == 200
    assert client.post("/api/verify", json={"shortCode": code, "password": "abcd"}).json()["valid"] is True

    removed = client.patch(f"/api/notes/{code}", json={"password": "abcd", "removePassword": True})
    assert removed.json()["has_password"] is False
    assert client.get(f"/api/notes/{code}").json()["content"] == "secret"


def test_update_short_code(client):
    create(client, content="other", customCode="occupied")
    code = create(client, content="mine")["shortCode"]

    conflict = client.patch(f"/api/notes/{code}", json={"newShortCode": "occupied"})
    assert conflict.status_code == 409

    moved = client.patch(f"/api/notes/{code}", json={"newShortCode": "fresh-code"})
    assert moved.status_code == 200
    assert moved.json()["short_code"] == "fresh-code"
    assert client.get(f"/api/notes/{code}").status_code == 404


def test_update_missing_note_returns_404(client):
    response = client.patch("/api/notes/missing1", json={"content": "x"})

    assert response.status_code == 404


def test_owner_token_header(client):
    created = create(client, content="secret", password="1234")
    code = created["shortCode"]
    headers = {"X-Note-Token": created["ownerToken"]}

    assert client.get(f"/api/notes/{code}", headers=headers).json()["is_owner"] is True

    updated = client.patch(f"/api/notes/{code}", json={"content": "by owner"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["content"] == "by owner"


def test_check_availability(client):
    code = create(client, content="x")["shortCode"]

    assert client.get(f"/api/check/{code}").json() == {"available": False}
    assert client.get("/api/check/unused-code").json() == {"available": True}
    assert client.get("/api/check/%20").status_code == 400


def test_verify_is_rate_limited(client):
    code = create(client, content="secret", password="1234")["shortCode"]
    body = {"shortCode": code, "password": "wrong"}

    statuses = [client.post("/api/verify", json=body).status_code for _ in range(11)]

    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429

    limited = client.post("/api/verify", json=body)
    assert limited.json() == {"error": "Too many password attempts. Please try again later."}
    assert int(limited.headers["Retry-After"]) > 0
    assert limited.headers["X-RateLimit-Remaining"] == "0"


def test_rate_limit_is_per_client_address(client):
    code = create(client, content="secret", password="1234")["shortCode"]
    body = {"shortCode": code, "password": "wrong"}

    for _ in range(10):
        client.post("/api/verify", json=body, headers={"X-Forwarded-For": "203.0.113.1"})

    assert client.post("/api/verify", json=body, headers={"X-Forwarded-For": "203.0.113.1"}).status_code == 429
    assert client.post("/api/verify", json=body, headers={"X-Forwarded-For": "203.0.113.2"}).status_code == 401


class FailingStore:
    async def find_by_short_code(self, short_code):
        raise StoreError()

    async def short_code_exists(self, short_code):
        raise RuntimeError("connection reset by peer at 10.1.2.3")


def test_store_failures_are_opaque():
    app.dependency_overrides[get_note_store] = lambda: FailingStore()
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            store_error = client.get("/api/notes/abc123")
            unexpected = client.get("/api/check/abc123")
    finally:
        app.dependency_overrides.clear()

    assert store_error.status_code == 500
    assert store_error.json() == {"error": "Failed to access note storage. Please try again."}
    assert unexpected.status_code == 500
    assert unexpected.json() == {"error": "An unexpected error occurred. Please try again."}
    assert "10.1.2.3" not in unexpected.text
