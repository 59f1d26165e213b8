"""End-to-end tests for signup, login, sessions and user profiles."""

from fastapi.testclient import TestClient
from helpers import TEST_PASSWORD, auth, signup


def _assert_no_password(response_text: str) -> None:
    assert "password" not in response_text.lower()
    assert "$2b$" not in response_text


class TestSignup:
    def test_signup_returns_user_and_token(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        assert body["token"]
        assert body["user"]["username"] == "jsnow"
        assert body["user"]["name"] == {"first": "Jsnow", "last": "Tester"}
        assert body["user"]["loggedIn"] is True
        assert body["user"]["role"]["title"] == "viewer"
        assert body["user"]["role"]["accessLevel"] == 0

    def test_signup_lowercases_email(self, client: TestClient) -> None:
        response = client.post(
            "/api/users",
            json={
                "username": "jsnow",
                "firstname": "J",
                "lastname": "S",
                "email": "J@W.org",
                "password": "winter",
            },
        )

        assert response.status_code == 201  # noqa: PLR2004
        assert response.json()["user"]["email"] == "j@w.org"
        _assert_no_password(response.text)

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post("/api/users", json={"username": "jsnow"})

        assert response.status_code == 400  # noqa: PLR2004
        assert response.json()["error"] == (
            "Please provide the username, firstname, lastname, email, "
            "and password values"
        )

    def test_unknown_role(self, client: TestClient) -> None:
        response = client.post(
            "/api/users",
            json={
                "username": "jsnow",
                "firstname": "J",
                "lastname": "S",
                "email": "j@w.org",
                "password": "winter",
                "role": "overlord",
            },
        )

        assert response.status_code == 400  # noqa: PLR2004
        assert response.json()["error"] == "Role not found"

    def test_unique_username_and_email(self, client: TestClient) -> None:
        signup(client, "jsnow")
        same_username = {
            "username": "jsnow",
            "firstname": "J",
            "lastname": "S",
            "email": "another@winterfell.org",
            "password": "winter",
        }
        same_email = {**same_username, "username": "other", "email": "JSNOW@winterfell.org"}

        for body in (same_username, same_email):
            response = client.post("/api/users", json=body)
            assert response.status_code == 400  # noqa: PLR2004
            assert response.json()["error"] == "The User already exists"


class TestLoginLogout:
    def test_login(self, client: TestClient) -> None:
        signup(client, "jsnow")

        response = client.post(
            "/api/users/login",
            json={"username": "jsnow", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert response.json()["token"]
        assert response.json()["user"]["loggedIn"] is True
        _assert_no_password(response.text)

    def test_login_unknown_user(self, client: TestClient) -> None:
        response = client.post(
            "/api/users/login",
            json={"username": "nobody", "password": "x"},
        )

        assert response.status_code == 404  # noqa: PLR2004
        assert response.json()["error"] == "Authentication failed. User Not Found."

    def test_login_wrong_password(self, client: TestClient) -> None:
        signup(client, "jsnow")

        response = client.post(
            "/api/users/login",
            json={"username": "jsnow", "password": "wrong"},
        )

        assert response.status_code == 401  # noqa: PLR2004
        assert response.json()["error"] == "Authentication failed. Wrong password."

    def test_logout_invalidates_session(self, client: TestClient) -> None:
        signup(client, "jsnow")
        login = client.post(
            "/api/users/login",
            json={"username": "jsnow", "password": TEST_PASSWORD},
        )
        token = login.json()["token"]

        response = client.post("/api/users/logout", headers=auth(token))
        assert response.status_code == 200  # noqa: PLR2004
        assert response.json() == {"message": "Successfully logged out"}

        session = client.get("/api/users/session", headers=auth(token))
        assert session.status_code == 200  # noqa: PLR2004
        assert session.json()["loggedIn"] is False

        protected = client.get("/api/documents", headers=auth(token))
        assert protected.status_code == 401  # noqa: PLR2004
        assert protected.json()["error"] == "Unauthorized Access. Please login first"

    def test_logout_twice_and_login_again(self, client: TestClient) -> None:
        token = signup(client, "jsnow")["token"]

        for _ in range(2):
            response = client.post("/api/users/logout", headers=auth(token))
            assert response.status_code == 200  # noqa: PLR2004

        for _ in range(2):
            login = client.post(
                "/api/users/login",
                json={"username": "jsnow", "password": TEST_PASSWORD},
            )
            token = login.json()["token"]

        session = client.get("/api/users/session", headers=auth(token))
        assert session.json()["loggedIn"] is True

    def test_logout_requires_valid_token(self, client: TestClient) -> None:
        assert client.post("/api/users/logout").status_code == 403  # noqa: PLR2004

        response = client.post("/api/users/logout", headers=auth("forged.token.value"))
        assert response.status_code == 401  # noqa: PLR2004
        assert response.json()["error"] == "Failed to authenticate token."

    def test_token_in_body_is_accepted(self, client: TestClient) -> None:
        token = signup(client, "jsnow")["token"]

        response = client.post("/api/users/logout", json={"token": token})

        assert response.status_code == 200  # noqa: PLR2004


class TestSession:
    def test_without_token(self, client: TestClient) -> None:
        response = client.get("/api/users/session")

        assert response.status_code == 200  # noqa: PLR2004
        assert response.json() == {"loggedIn": False}

    def test_with_invalid_token(self, client: TestClient) -> None:
        response = client.get("/api/users/session", headers=auth("not-a-token"))

        assert response.status_code == 200  # noqa: PLR2004
        assert response.json() == {"loggedIn": False}

    def test_logged_in(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        response = client.get("/api/users/session", headers=auth(body["token"]))

        assert response.json()["loggedIn"] is True
        assert response.json()["user"]["id"] == body["user"]["id"]
        _assert_no_password(response.text)

    def test_deleted_user(self, client: TestClient) -> None:
        body = signup(client, "jsnow")
        token = body["token"]
        client.delete(f"/api/users/{body['user']['id']}", headers=auth(token))

        response = client.get("/api/users/session", headers=auth(token))

        assert response.json() == {"loggedIn": False}


class TestGate:
    def test_no_token(self, client: TestClient) -> None:
        response = client.get("/api/documents")

        assert response.status_code == 403  # noqa: PLR2004
        assert response.json()["error"] == "No token provided."

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get("/api/documents", headers=auth("garbage"))

        assert response.status_code == 401  # noqa: PLR2004
        assert response.json()["error"] == "Failed to authenticate token."


class TestProfiles:
    def test_fetch_own_profile(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        response = client.get(
            f"/api/users/{body['user']['id']}",
            headers=auth(body["token"]),
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert response.json()["username"] == "jsnow"
        _assert_no_password(response.text)

    def test_cannot_fetch_other_profile(self, client: TestClient) -> None:
        jsnow = signup(client, "jsnow")
        nstark = signup(client, "nstark")

        response = client.get(
            f"/api/users/{nstark['user']['id']}",
            headers=auth(jsnow["token"]),
        )

        assert response.status_code == 403  # noqa: PLR2004
        assert response.json()["error"] == "Unauthorized Access"

    def test_update_own_profile(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        response = client.put(
            f"/api/users/{body['user']['id']}",
            json={
                "username": "theImp",
                "firstname": "Half",
                "lastname": "Man",
                "email": "MasterOfCoin@westeros.org",
                "ownerId": "ignored",
            },
            headers=auth(body["token"]),
        )

        assert response.status_code == 200  # noqa: PLR2004
        assert response.json()["username"] == "theImp"
        assert response.json()["name"] == {"first": "Half", "last": "Man"}
        assert response.json()["email"] == "masterofcoin@westeros.org"
        _assert_no_password(response.text)

    def test_update_password(self, client: TestClient) -> None:
        body = signup(client, "jsnow")
        client.put(
            f"/api/users/{body['user']['id']}",
            json={"password": "newPassword"},
            headers=auth(body["token"]),
        )

        old = client.post(
            "/api/users/login",
            json={"username": "jsnow", "password": TEST_PASSWORD},
        )
        new = client.post(
            "/api/users/login",
            json={"username": "jsnow", "password": "newPassword"},
        )

        assert old.status_code == 401  # noqa: PLR2004
        assert new.status_code == 200  # noqa: PLR2004

    def test_update_other_user_is_forbidden(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        response = client.put(
            "/api/users/i-do-not-exist",
            json={"username": "theImp"},
            headers=auth(body["token"]),
        )

        assert response.status_code == 403  # noqa: PLR2004
        assert response.json()["error"] == "Unauthorized Access"

    def test_only_admin_changes_roles(self, client: TestClient) -> None:
        user = signup(client, "jsnow")
        admin = signup(client, "zadmin", role="admin")

        own = client.put(
            f"/api/users/{user['user']['id']}",
            json={"role": "admin"},
            headers=auth(user["token"]),
        )
        by_admin = client.put(
            f"/api/users/{user['user']['id']}",
            json={"role": "staff"},
            headers=auth(admin["token"]),
        )

        assert own.status_code == 403  # noqa: PLR2004
        assert by_admin.status_code == 200  # noqa: PLR2004
        assert by_admin.json()["role"]["title"] == "staff"

    def test_admin_missing_user(self, client: TestClient) -> None:
        admin = signup(client, "zadmin", role="admin")

        response = client.get("/api/users/missing", headers=auth(admin["token"]))

        assert response.status_code == 404  # noqa: PLR2004

    def test_delete_own_account(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        response = client.delete(
            f"/api/users/{body['user']['id']}",
            headers=auth(body["token"]),
        )

        assert response.status_code == 204  # noqa: PLR2004
        assert response.content == b""

    def test_delete_other_user_is_forbidden(self, client: TestClient) -> None:
        body = signup(client, "jsnow")

        response = client.delete("/api/users/cant-touch-this", headers=auth(body["token"]))

        assert response.status_code == 403  # noqa: PLR2004
        assert response.json()["error"] == "Unauthorized Access"


class TestAdministration:
    def test_list_users_requires_admin(self, client: TestClient) -> None:
        user = signup(client, "jsnow")
        admin = signup(client, "zadmin", role="admin")

        denied = client.get("/api/users", headers=auth(user["token"]))
        allowed = client.get("/api/users", headers=auth(admin["token"]))

        assert denied.status_code == 403  # noqa: PLR2004
        assert denied.json()["error"] == "Unauthorized Access"
        assert allowed.status_code == 200  # noqa: PLR2004
        assert {entry["username"] for entry in allowed.json()} == {"jsnow", "zadmin"}
        _assert_no_password(allowed.text)

    def test_stats_requires_admin(self, client: TestClient) -> None:
        user = signup(client, "jsnow")
        admin = signup(client, "zadmin", role="admin")
        client.post("/api/documents", json={"title": "D1"}, headers=auth(user["token"]))

        denied = client.get("/api/stats", headers=auth(user["token"]))
        allowed = client.get("/api/stats", headers=auth(admin["token"]))

        assert denied.status_code == 403  # noqa: PLR2004
        assert allowed.status_code == 200  # noqa: PLR2004
        assert allowed.json() == {"documents": 1, "users": 2, "roles": 2}

    def test_user_documents(self, client: TestClient) -> None:
        owner = signup(client, "jsnow")
        other = signup(client, "nstark")
        for title, role in (("D1", "viewer"), ("D2", "staff")):
            client.post(
                "/api/documents",
                json={"title": title, "role": role},
                headers=auth(owner["token"]),
            )
        owner_id = owner["user"]["id"]

        own = client.get(f"/api/users/{owner_id}/documents", headers=auth(owner["token"]))
        seen = client.get(f"/api/users/{owner_id}/documents", headers=auth(other["token"]))

        assert sorted(doc["title"] for doc in own.json()) == ["D1", "D2"]
        assert [doc["title"] for doc in seen.json()] == ["D1"]
