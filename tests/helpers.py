"""Helpers shared by the API tests."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi.testclient import TestClient

from docmanager.queries import Database

TEST_PASSWORD = "youKnowNothing"  # noqa: S105


def run_with_database(
    db_path: str,
    action: Callable[[Database], Awaitable[Any]],
) -> Any:
    """Run an async action against the database file outside of the app."""

    async def runner() -> Any:
        database = await Database.connect(db_path)
        try:
            await database.initialize_tables()
            return await action(database)
        finally:
            await database.close()

    return asyncio.run(runner())


def signup(
    client: TestClient,
    username: str,
    role: str | None = None,
    password: str = TEST_PASSWORD,
) -> dict[str, Any]:
    """Register a user through the API and return the response body."""
    body = {
        "username": username,
        "firstname": username.capitalize(),
        "lastname": "Tester",
        "email": f"{username}@winterfell.org",
        "password": password,
    }
    if role is not None:
        body["role"] = role
    response = client.post("/api/users", json=body)
    assert response.status_code == 201, response.text  # noqa: PLR2004
    return response.json()


def auth(token: str) -> dict[str, str]:
    return {"x-access-token": token}
