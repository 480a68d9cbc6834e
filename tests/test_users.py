from .conftest import signup, signin, auth_headers

class TestUserAdministration:

    def test_list_users_admin(self, client, admin_headers):
        signup(client)

        response = client.get("/v1/users", headers=admin_headers)
        assert response.status_code == 200

        usernames = [user["username"] for user in response.json()]
        assert usernames == ["root", "alice"]

    def test_list_users_requires_admin(self, client):
        signup(client)

        response = client.get("/v1/users", headers=auth_headers(client))
        assert response.status_code == 403

    def test_get_own_user(self, client):
        created = signup(client).json()

        response = client.get(f"/v1/users/{created['id']}", headers=auth_headers(client))
        assert response.status_code == 200
        assert response.json()["email"] == "a@b.com"

    def test_get_other_user_forbidden(self, client):
        signup(client)
        other = signup(client, username="bob", email="bob@b.com").json()

        response = client.get(f"/v1/users/{other['id']}", headers=auth_headers(client))
        assert response.status_code == 403

    def test_get_missing_user(self, client, admin_headers):
        response = client.get("/v1/users/999", headers=admin_headers)
        assert response.status_code == 404

    def test_update_role(self, client, admin_headers):
        created = signup(client).json()

        response = client.patch(
            f"/v1/users/{created['id']}/role",
            json={"role": "doctor"},
            headers=admin_headers
        )
        assert response.status_code == 200

        data = response.json()
        assert data["role"] == "doctor"
        assert data["is_doctor"] is True
        assert data["is_patient"] is False

    def test_update_role_rejects_unknown_role(self, client, admin_headers):
        created = signup(client).json()

        response = client.patch(
            f"/v1/users/{created['id']}/role",
            json={"role": "nurse"},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_deactivated_user_cannot_sign_in(self, client, admin_headers):
        created = signup(client).json()
        refresh_token = signin(client)["refresh_token"]

        response = client.patch(
            f"/v1/users/{created['id']}/status",
            params={"is_active": False},
            headers=admin_headers
        )
        assert response.status_code == 200

        response = client.post(
            "/v1/users/signin",
            json={"username": "alice", "password": "pass1"}
        )
        assert response.status_code == 401

        response = client.post("/v1/users/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 401
