"""Tests for authentication endpoints and flows."""

from conftest import PASSWORD, code_for
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.user import User

REGISTRATION = {
    "email": "new@example.com",
    "phone_number": "+250788555666",
    "password": PASSWORD,
    "first_name": "New",
    "last_name": "Candidate",
}


def login(client: TestClient, username: str = "a@b.com", password: str = PASSWORD):
    return client.post("/api/v1/auth/candidate-login", json={"username": username, "password": password})


class TestRegistration:
    """Tests for candidate registration."""

    def test_register_success(self, client: TestClient, db_session: Session, email_sender):
        response = client.post("/api/v1/auth/register", json=REGISTRATION)
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["is_verified"] is False
        assert "password_hash" not in data["user"]
        assert "refresh_token_hash" not in data["user"]
        assert email_sender.sent[0]["to"] == "new@example.com"

    def test_register_duplicate(self, client: TestClient, pending_user: User):
        response = client.post(
            "/api/v1/auth/register",
            json={**REGISTRATION, "email": "a@b.com"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "AlreadyExists"

    def test_register_weak_password(self, client: TestClient):
        response = client.post("/api/v1/auth/register", json={**REGISTRATION, "password": "password"})
        assert response.status_code == 422

    def test_register_invalid_phone(self, client: TestClient):
        response = client.post("/api/v1/auth/register", json={**REGISTRATION, "phone_number": "12345"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidIdentifier"

    def test_register_dispatch_failure(self, client: TestClient, db_session: Session, email_sender):
        email_sender.fail = True
        response = client.post("/api/v1/auth/register", json=REGISTRATION)
        assert response.status_code == 502
        assert response.json()["error"] == "DispatchFailed"
        assert db_session.query(User).filter(User.email == "new@example.com").count() == 1


class TestVerification:
    """Tests for account verification."""

    def test_verify_success(self, client: TestClient, db_session: Session, pending_user: User):
        response = client.get(f"/api/v1/auth/verify?code={code_for(db_session, pending_user.id)}")
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["is_verified"] is True
        assert data["access_token"]
        assert data["refresh_token"]
        assert "accessToken" in response.cookies

    def test_verify_invalid_code(self, client: TestClient, pending_user: User):
        response = client.get("/api/v1/auth/verify?code=WRONG123")
        assert response.status_code == 401
        assert response.json()["error"] == "InvalidCode"

    def test_request_new_code(self, client: TestClient, db_session: Session, pending_user: User):
        first = code_for(db_session, pending_user.id)
        response = client.post("/api/v1/auth/request-verification-code", json={"username": "a@b.com"})
        assert response.status_code == 200
        assert code_for(db_session, pending_user.id) != first

    def test_request_new_code_already_verified(self, client: TestClient, verified_user: User):
        response = client.post("/api/v1/auth/request-verification-code", json={"username": "a@b.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "AlreadyVerified"

    def test_request_new_code_unknown(self, client: TestClient):
        response = client.post("/api/v1/auth/request-verification-code", json={"username": "nobody@b.com"})
        assert response.status_code == 404


class TestLogin:
    """Tests for portal login."""

    def test_login_success(self, client: TestClient, verified_user: User):
        response = login(client)
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == "a@b.com"
        assert data["user"]["last_login_at"] is not None
        assert "password_hash" not in data["user"]
        assert "accessToken" in response.cookies
        assert "refreshToken" in response.cookies

    def test_login_wrong_password(self, client: TestClient, verified_user: User):
        response = login(client, password="Wrong1234")
        assert response.status_code == 401
        assert response.json()["error"] == "InvalidCredential"

    def test_login_unknown_user(self, client: TestClient):
        response = login(client, username="nobody@b.com")
        assert response.status_code == 401
        assert response.json()["error"] == "InvalidCredential"

    def test_login_unverified(self, client: TestClient, pending_user: User):
        response = login(client)
        assert response.status_code == 403
        assert response.json()["error"] == "Unverified"

    def test_login_invalid_identifier(self, client: TestClient):
        response = login(client, username="12345")
        assert response.status_code == 400

    def test_admin_login(self, client: TestClient, admin_user: User):
        response = client.post(
            "/api/v1/auth/admin-login",
            json={"username": "admin@example.com", "password": "Admin1234"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    def test_candidate_at_admin_portal(self, client: TestClient, verified_user: User):
        response = client.post("/api/v1/auth/admin-login", json={"username": "a@b.com", "password": PASSWORD})
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"


class TestSession:
    """Tests for refresh, logout and authenticated endpoints."""

    def test_me_with_bearer_token(self, client: TestClient, verified_user: User):
        token = login(client).json()["access_token"]
        client.cookies.clear()
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["id"] == verified_user.id

    def test_me_requires_auth(self, client: TestClient):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401

    def test_refresh_with_cookie(self, client: TestClient, verified_user: User):
        login(client)
        response = client.post("/api/v1/auth/refresh-token")
        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_refresh_with_body(self, client: TestClient, verified_user: User):
        refresh_token = login(client).json()["refresh_token"]
        client.cookies.clear()
        response = client.post("/api/v1/auth/refresh-token", json={"refresh_token": refresh_token})
        assert response.status_code == 200

    def test_refresh_without_token(self, client: TestClient):
        response = client.post("/api/v1/auth/refresh-token")
        assert response.status_code == 401

    def test_logout_revokes_refresh_token(self, client: TestClient, verified_user: User):
        refresh_token = login(client).json()["refresh_token"]
        response = client.post("/api/v1/auth/logout")
        assert response.status_code == 200

        client.cookies.clear()
        response = client.post("/api/v1/auth/refresh-token", json={"refresh_token": refresh_token})
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_logout_requires_auth(self, client: TestClient):
        response = client.post("/api/v1/auth/logout")
        assert response.status_code == 401


class TestPasswords:
    """Tests for password change and reset."""

    def test_change_password(self, client: TestClient, verified_user: User):
        login(client)
        response = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "Newpass123"},
        )
        assert response.status_code == 200
        assert login(client, password="Newpass123").status_code == 200

    def test_change_password_same(self, client: TestClient, verified_user: User):
        login(client)
        response = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": PASSWORD, "new_password": PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "SamePassword"

    def test_forgot_and_reset_password(self, client: TestClient, db_session: Session, verified_user: User):
        response = client.post("/api/v1/auth/forgot-password", json={"username": "a@b.com"})
        assert response.status_code == 200

        code = code_for(db_session, verified_user.id)
        response = client.patch("/api/v1/auth/reset-password", json={"code": code, "new_password": "Newpass123"})
        assert response.status_code == 200
        assert login(client, password="Newpass123").status_code == 200

        response = client.patch("/api/v1/auth/reset-password", json={"code": code, "new_password": "Another123"})
        assert response.status_code == 401

    def test_forgot_password_unknown(self, client: TestClient):
        response = client.post("/api/v1/auth/forgot-password", json={"username": "nobody@b.com"})
        assert response.status_code == 404


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["app"] == "talent-onboarding"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
