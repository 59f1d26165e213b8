"""End-to-end tests for the role endpoints."""

from fastapi.testclient import TestClient
from helpers import auth, signup


class TestRoles:
    def test_create_role(self, client: TestClient) -> None:
        token = signup(client, "jsnow")["token"]

        response = client.post("/api/roles", json={"title": "staff"}, headers=auth(token))

        assert response.status_code == 201  # noqa: PLR2004
        assert response.json()["title"] == "staff"
        assert response.json()["accessLevel"] == 1
        assert response.json()["id"]

    def test_duplicate_role(self, client: TestClient) -> None:
        # signing up already created the viewer role
        token = signup(client, "jsnow")["token"]

        response = client.post("/api/roles", json={"title": "viewer"}, headers=auth(token))

        assert response.status_code == 400  # noqa: PLR2004
        assert response.json()["error"] == "Role already exists"

    def test_missing_title(self, client: TestClient) -> None:
        token = signup(client, "jsnow")["token"]

        response = client.post("/api/roles", json={}, headers=auth(token))

        assert response.status_code == 400  # noqa: PLR2004
        assert response.json()["error"] == "The role title is required"

    def test_invalid_title(self, client: TestClient) -> None:
        token = signup(client, "jsnow")["token"]

        response = client.post(
            "/api/roles",
            json={"title": "overlord"},
            headers=auth(token),
        )

        assert response.status_code == 400  # noqa: PLR2004
        assert response.json()["error"] == "overlord is not a valid role title"

    def test_list_roles_by_access_level(self, client: TestClient) -> None:
        token = signup(client, "zadmin", role="admin")["token"]
        signup(client, "jsnow")

        response = client.get("/api/roles", headers=auth(token))

        assert response.status_code == 200  # noqa: PLR2004
        assert [role["title"] for role in response.json()] == ["viewer", "admin"]
        assert [role["accessLevel"] for role in response.json()] == [0, 2]

    def test_roles_require_login(self, client: TestClient) -> None:
        assert client.get("/api/roles").status_code == 403  # noqa: PLR2004
        response = client.post("/api/roles", json={"title": "staff"})
        assert response.status_code == 403  # noqa: PLR2004
