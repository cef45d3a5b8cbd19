"""Tests for the auth module — token creation, validation, and dev mode bypass."""

from sitecraft.core.token_factory import create_token, decode_token
from sitecraft.core.config import settings
from tests.conftest import make_project, make_user


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("user-1", "test-secret", email="a@example.com")
        payload = decode_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "user-1"
        assert payload.email == "a@example.com"

    def test_wrong_secret_returns_none(self):
        token = create_token("user-1", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("user-1", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_empty_subject_returns_none(self):
        token = create_token("", "secret")
        assert decode_token(token, "secret") is None


class TestAuthEnabled:

    def test_missing_token_is_401(self, client):
        resp = client.get("/api/projects")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_invalid_token_is_401(self, client):
        resp = client.get("/api/projects", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_token_for_unknown_user_is_401(self, client):
        token = create_token("ghost", settings.jwt_secret_key)
        resp = client.get("/api/projects", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_valid_token_succeeds(self, client, auth_headers):
        assert client.get("/api/projects", headers=auth_headers).status_code == 200

    def test_public_endpoints_need_no_token(self, client):
        assert client.get("/api/published").status_code == 200


class TestAuthDisabledMode:
    """When AUTH_ENABLED=false, every request acts as the development user."""

    def test_requests_act_as_dev_user(self, client, db, monkeypatch):
        monkeypatch.setattr(settings, "auth_enabled", False)
        make_user(db, user_id=settings.dev_user_id)
        make_project(db, user_id=settings.dev_user_id, name="Dev project")

        resp = client.get("/api/projects")
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["Dev project"]
