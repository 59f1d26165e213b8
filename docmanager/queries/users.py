"""Queries for the users table.

Passwords are hashed here, on write, so cleartext never reaches storage.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass

from docmanager.common import Role, RoleRecord, User, hash_password

from .database import Database

LOGGER = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "The User already exists"


@dataclass
class UserChanges:
    """Fields of a user that an update may overwrite; None leaves a field as is."""

    username: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = None
    role: RoleRecord | None = None


class UserQueries:
    """Repository for user records."""

    SELECT_USER = """
        SELECT u.id, u.username, u.email, u.first_name, u.last_name,
               u.password_hash, u.logged_in, r.id, r.title
        FROM users u LEFT JOIN roles r ON r.id = u.role_id
        """

    ADD_USER = """
        INSERT INTO users (
            id, username, email, first_name, last_name,
            password_hash, role_id, logged_in
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """

    SET_LOGGED_IN = """
        UPDATE users SET logged_in = ? WHERE id = ?
        """

    DELETE_USER = """
        DELETE FROM users WHERE id = ?
        """

    _COLUMNS = {
        "username": "username",
        "email": "email",
        "first_name": "first_name",
        "last_name": "last_name",
    }

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _row_to_user(row: tuple) -> User:
        role = None
        if row[7] is not None:
            role = RoleRecord(id=row[7], title=Role(row[8]))
        return User(
            id=row[0],
            username=row[1],
            email=row[2],
            first_name=row[3],
            last_name=row[4],
            password_hash=row[5],
            logged_in=bool(row[6]),
            role=role,
        )

    async def create(  # noqa: PLR0913
        self,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        role: RoleRecord,
        *,
        logged_in: bool = False,
    ) -> User:
        """Create a user with a freshly hashed password.

        :param username: Unique, case-preserving username
        :param email: Unique email, stored lowercased
        :param first_name: First name
        :param last_name: Last name
        :param password: Cleartext password, hashed before storage
        :param role: The user's role
        :param logged_in: Initial session flag
        :return: The stored user
        :raises DuplicateResource: If the username or email is taken
        """
        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(
            id=uuid.uuid4().hex,
            username=username.strip(),
            email=email.strip().lower(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            password_hash=password_hash,
            role=role,
            logged_in=logged_in,
        )
        await self.database.write(
            UserQueries.ADD_USER,
            (
                user.id,
                user.username,
                user.email,
                user.first_name,
                user.last_name,
                user.password_hash,
                role.id,
                int(logged_in),
            ),
            duplicate_message=DUPLICATE_USER_MESSAGE,
        )
        LOGGER.info("Created user %s with role %s", user.username, role.title)
        return user

    async def get(self, user_id: str) -> User | None:
        row = await self.database.fetchone(
            UserQueries.SELECT_USER + " WHERE u.id = ?",
            (user_id,),
        )
        return None if row is None else self._row_to_user(row)

    async def get_by_username(self, username: str) -> User | None:
        row = await self.database.fetchone(
            UserQueries.SELECT_USER + " WHERE u.username = ?",
            (username.strip(),),
        )
        return None if row is None else self._row_to_user(row)

    async def get_by_email(self, email: str) -> User | None:
        row = await self.database.fetchone(
            UserQueries.SELECT_USER + " WHERE u.email = ?",
            (email.strip().lower(),),
        )
        return None if row is None else self._row_to_user(row)

    async def list_all(self) -> list[User]:
        rows = await self.database.fetchall(
            UserQueries.SELECT_USER + " ORDER BY u.username",
        )
        return [self._row_to_user(row) for row in rows]

    async def update(self, user_id: str, changes: UserChanges) -> User | None:
        """Overwrite the given fields of a user.

        :param user_id: Id of the user to update
        :param changes: Fields to overwrite
        :return: The updated user, or None if it does not exist
        :raises DuplicateResource: If the new username or email is taken
        """
        assignments: list[str] = []
        params: list[object] = []

        for attribute, column in UserQueries._COLUMNS.items():
            value = getattr(changes, attribute)
            if value is None:
                continue
            value = value.strip()
            if attribute == "email":
                value = value.lower()
            assignments.append(f"{column} = ?")
            params.append(value)

        if changes.password is not None:
            assignments.append("password_hash = ?")
            params.append(await asyncio.to_thread(hash_password, changes.password))

        if changes.role is not None:
            assignments.append("role_id = ?")
            params.append(changes.role.id)

        if assignments:
            query = f"UPDATE users SET {', '.join(assignments)} WHERE id = ?"  # noqa: S608
            await self.database.write(
                query,
                (*params, user_id),
                duplicate_message=DUPLICATE_USER_MESSAGE,
            )

        return await self.get(user_id)

    async def set_logged_in(self, user_id: str, *, logged_in: bool) -> bool:
        """Set the persistent session flag of a user.

        :return: True if the user exists
        """
        updated = await self.database.write(
            UserQueries.SET_LOGGED_IN,
            (int(logged_in), user_id),
        )
        return updated > 0

    async def delete(self, user_id: str) -> int:
        """Delete a user.

        :return: Number of rows deleted
        """
        return await self.database.write(UserQueries.DELETE_USER, (user_id,))

    async def count(self) -> int:
        return await self.database.count("users")
