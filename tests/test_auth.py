import inspect
import logging

import pytest

from openmed.api.v1.auth import signin as signin_endpoint, signup as signup_endpoint
from openmed.services.auth_service import AuthService

from .conftest import signup, signin, auth_headers, TestingSessionLocal

class TestAccountService:

    def test_create_user_returns_id(self, db_session):
        auth_service = AuthService(db_session)
        user_id = auth_service.create_user(
            "bob", "bob@b.com", "secret", attributes={"personId": 7}
        )

        user = auth_service.get_user_by_id(user_id)
        assert user.username == "bob"
        assert user.person_id == 7
        assert user.password_hash != "secret"

    def test_get_user_by_id_is_stable(self, db_session):
        """Test that repeated lookups return the same logical record."""
        auth_service = AuthService(db_session)
        user_id = auth_service.create_user("bob", "bob@b.com", "secret", {})

        first = auth_service.get_user_by_id(user_id)
        other_session = TestingSessionLocal()
        try:
            second = AuthService(other_session).get_user_by_id(user_id)
            assert (first.id, first.username, first.email) == (
                second.id, second.username, second.email
            )
        finally:
            other_session.close()

    def test_uncommitted_user_not_logged_as_created(self, db_session, caplog):
        caplog.set_level(logging.DEBUG, logger="openmed.services.auth_service")
        auth_service = AuthService(db_session)

        auth_service.create_user("bob", "bob@b.com", "secret", {}, commit=False)
        db_session.rollback()
        assert "Created user" not in caplog.text
        assert "pending commit" in caplog.text

        caplog.clear()
        auth_service.create_user("carol", "carol@b.com", "secret", {})
        assert "Created user" in caplog.text

    def test_get_user_by_id_missing(self, db_session):
        assert AuthService(db_session).get_user_by_id(999) is None

class TestAuthentication:

    def test_signin_success(self, client):
        """Test successful signin."""
        signup(client)

        data = signin(client)
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "alice"
        assert data["user"]["is_patient"] is True

    def test_signin_wrong_password(self, client):
        signup(client)

        response = client.post(
            "/v1/users/signin",
            json={"username": "alice", "password": "wrongpassword"}
        )
        assert response.status_code == 401

    def test_signin_unknown_user(self, client):
        response = client.post(
            "/v1/users/signin",
            json={"username": "nobody", "password": "whatever"}
        )
        assert response.status_code == 401

    def test_get_current_user(self, client):
        """Test getting current user info."""
        created = signup(client).json()

        response = client.get("/v1/users/me", headers=auth_headers(client))
        assert response.status_code == 200

        data = response.json()
        assert data["id"] == created["id"]
        assert data["person_id"] == created["personId"]
        assert data["role"] == "patient"

    def test_get_current_user_invalid_token(self, client):
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/v1/users/me", headers=headers)
        assert response.status_code == 401

    def test_refresh_token_cannot_access_api(self, client):
        signup(client)
        refresh_token = signin(client)["refresh_token"]

        response = client.get(
            "/v1/users/me", headers={"Authorization": f"Bearer {refresh_token}"}
        )
        assert response.status_code == 401

    def test_refresh_token(self, client):
        """Test token refresh and rotation."""
        signup(client)
        refresh_token = signin(client)["refresh_token"]

        response = client.post("/v1/users/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 200

        data = response.json()
        assert data["refresh_token"] != refresh_token

        # The rotated token is revoked
        response = client.post("/v1/users/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 401

    def test_refresh_invalid_token(self, client):
        response = client.post("/v1/users/refresh", json={"refresh_token": "invalid_token"})
        assert response.status_code == 401

    def test_signout(self, client):
        """Test that a signed out refresh token stops working."""
        signup(client)
        refresh_token = signin(client)["refresh_token"]

        response = client.post("/v1/users/signout", json={"refresh_token": refresh_token})
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully logged out"

        response = client.post("/v1/users/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 401

    @pytest.mark.parametrize("path", ["/v1/users/me", "/v1/users/1"])
    def test_requires_token(self, client, path):
        response = client.get(path)
        assert response.status_code in (401, 403)

class TestBlockingEndpoints:

    @pytest.mark.parametrize("endpoint", [signup_endpoint, signin_endpoint])
    def test_hashing_endpoints_run_in_threadpool(self, endpoint):
        """Test that bcrypt/database endpoints are plain functions, not coroutines."""
        assert not inspect.iscoroutinefunction(endpoint)
