"""Shared aiosqlite connection and schema for the identity repository."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

import aiosqlite
from aiosqlite import Connection

from docmanager.errors import DuplicateResource

LOGGER = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_timestamp(moment: datetime) -> str:
    """Format a datetime as a fixed-width UTC ISO string.

    Fixed width keeps lexical order equal to chronological order in SQL.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def from_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


class Database:
    """Owns the SQLite connection shared by every query class.

    Reads and writes share one lock, so a read never lands between a write
    and its commit or rollback on the shared connection.
    """

    CREATE_ROLES_TABLE = """
        CREATE TABLE IF NOT EXISTS roles (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL UNIQUE,
            access_level INTEGER NOT NULL
        );
        """

    CREATE_USERS_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            email TEXT NOT NULL UNIQUE,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            role_id TEXT NOT NULL REFERENCES roles (id),
            logged_in INTEGER NOT NULL DEFAULT 0
        );
        """

    CREATE_DOCUMENTS_TABLE = """
        CREATE TABLE IF NOT EXISTS documents (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL UNIQUE,
            content TEXT NOT NULL DEFAULT '',
            owner_id TEXT NOT NULL,
            role_id TEXT NOT NULL REFERENCES roles (id),
            date_created TEXT NOT NULL,
            last_modified TEXT NOT NULL
        );
        """

    CREATE_DOCUMENTS_DATE_INDEX = """
        CREATE INDEX IF NOT EXISTS documents_date_created
        ON documents (date_created);
        """

    def __init__(self, connection: Connection) -> None:
        """Wrap an open aiosqlite connection.

        :param connection: Database connection
        """
        self.connection = connection
        self.lock = asyncio.Lock()

    @classmethod
    async def connect(cls, db_path: str) -> "Database":
        """Open a connection to the SQLite database file.

        :param db_path: Path to the SQLite database file
        :return: Connected Database instance
        """
        connection = await aiosqlite.connect(db_path)
        await connection.execute("PRAGMA foreign_keys = ON;")
        return cls(connection)

    async def close(self) -> None:
        """Close the database connection."""
        await self.connection.close()

    async def initialize_tables(self) -> None:
        """Create the roles, users and documents tables if they do not exist."""
        async with self.lock:
            try:
                await self.connection.execute(Database.CREATE_ROLES_TABLE)
                await self.connection.execute(Database.CREATE_USERS_TABLE)
                await self.connection.execute(Database.CREATE_DOCUMENTS_TABLE)
                await self.connection.execute(Database.CREATE_DOCUMENTS_DATE_INDEX)
                await self.connection.commit()
            except Exception:
                await self.connection.rollback()
                LOGGER.exception("Error initializing tables")
                raise

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Any:
        async with self.lock, self.connection.execute(query, params) as cursor:
            return await cursor.fetchone()

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> Iterable[Any]:
        async with self.lock, self.connection.execute(query, params) as cursor:
            return await cursor.fetchall()

    async def write(
        self,
        query: str,
        params: Sequence[Any] = (),
        *,
        duplicate_message: str | None = None,
    ) -> int:
        """Execute a single write statement and commit it.

        :param query: The SQL statement
        :param params: Statement parameters
        :param duplicate_message: Message for the DuplicateResource raised when
            the statement violates a UNIQUE constraint
        :return: Number of affected rows
        :raises DuplicateResource: On a uniqueness violation
        """
        async with self.lock:
            try:
                cursor = await self.connection.execute(query, params)
                await self.connection.commit()
            except aiosqlite.IntegrityError as e:
                await self.connection.rollback()
                if duplicate_message and "UNIQUE constraint failed" in str(e):
                    LOGGER.debug("Duplicate write rejected: %s", e)
                    raise DuplicateResource(duplicate_message) from e
                raise
            except Exception:
                await self.connection.rollback()
                raise
            return cursor.rowcount

    async def count(self, table: str) -> int:
        """Return the number of rows in one of the known tables."""
        if table not in {"roles", "users", "documents"}:
            msg = f"Unknown table: {table}"
            raise ValueError(msg)
        row = await self.fetchone(f"SELECT COUNT(*) FROM {table};")  # noqa: S608
        return row[0] if row else 0
