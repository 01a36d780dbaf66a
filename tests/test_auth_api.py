from datetime import datetime, timedelta, timezone

from jose import jwt

from src.api.auth import create_access_token, decode_access_token, hash_password, verify_password
from src.api.settings import get_settings


class TestRegister:
    def test_register_returns_token_and_user(self, client):
        res = client.post(
            "/api/auth/register",
            json={"name": "Alice", "email": "Alice@Example.com", "password": "secret123"},
        )
        assert res.status_code == 201
        body = res.json()
        assert body["name"] == "Alice"
        assert body["email"] == "alice@example.com"
        assert body["token"]
        assert body["id"]
        assert "createdAt" in body
        assert "password_hash" not in body
        assert "password" not in body

    def test_duplicate_email_rejected(self, client, register):
        register()
        res = client.post(
            "/api/auth/register",
            json={"name": "Other", "email": "ALICE@example.com", "password": "secret123"},
        )
        assert res.status_code == 400
        assert res.json()["message"] == "User already exists"

    def test_invalid_payloads(self, client):
        bad = [
            {"email": "a@example.com", "password": "secret123"},
            {"name": "A", "email": "not-an-email", "password": "secret123"},
            {"name": "A", "email": "a@example.com", "password": "123"},
            {"name": "  ", "email": "a@example.com", "password": "secret123"},
        ]
        for payload in bad:
            res = client.post("/api/auth/register", json=payload)
            assert res.status_code == 400, payload
            assert res.json()["error"] == "ValidationError"


class TestLogin:
    def test_login_with_valid_credentials(self, client, register):
        alice = register()
        res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        assert res.status_code == 200
        body = res.json()
        assert body["id"] == alice["id"]
        assert body["token"]

    def test_login_wrong_password(self, client, register):
        register()
        res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-one"})
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid email or password"

    def test_login_unknown_email(self, client):
        res = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert res.status_code == 401


class TestMeAndLogout:
    def test_me_returns_current_user(self, client, register, auth_headers):
        alice = register()
        res = client.get("/api/auth/me", headers=auth_headers(alice["token"]))
        assert res.status_code == 200
        assert res.json()["id"] == alice["id"]
        assert res.json()["name"] == "Alice"
        assert "token" not in res.json()

    def test_me_rejects_bad_tokens(self, client):
        assert client.get("/api/auth/me").status_code == 401
        res = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"] == "Bearer"

    def test_token_signed_with_other_key_rejected(self, client, register, auth_headers):
        alice = register()
        forged = jwt.encode({"sub": alice["id"], "jti": "x", "exp": 9999999999}, "other-key", algorithm="HS256")
        assert client.get("/api/auth/me", headers=auth_headers(forged)).status_code == 401

    def test_expired_token_rejected(self, client, register, auth_headers):
        alice = register()
        settings = get_settings()
        past = int((datetime.now(timezone.utc) - timedelta(minutes=5)).timestamp())
        expired = jwt.encode(
            {"sub": alice["id"], "jti": "old", "exp": past},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert client.get("/api/auth/me", headers=auth_headers(expired)).status_code == 401

    def test_token_for_unknown_user_rejected(self, client, auth_headers):
        token, _ = create_access_token("no-such-user")
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_logout_revokes_only_that_token(self, client, register, auth_headers):
        first = register()["token"]
        second = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"}
        ).json()["token"]

        res = client.post("/api/auth/logout", headers=auth_headers(first))
        assert res.status_code == 200
        assert res.json() == {"message": "Logged out"}

        assert client.get("/api/todos", headers=auth_headers(first)).status_code == 401
        assert client.get("/api/todos", headers=auth_headers(second)).status_code == 200

    def test_logout_requires_token(self, client):
        assert client.post("/api/auth/logout").status_code == 401


class TestSecurityHelpers:
    def test_password_hash_roundtrip(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    def test_token_claims(self):
        token, expires_at = create_access_token("user-1")
        claims = decode_access_token(token)
        assert claims["sub"] == "user-1"
        assert claims["jti"]
        assert claims["exp"] == int(expires_at.timestamp())
