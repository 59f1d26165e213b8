"""Queries for the roles table."""

import logging
import uuid

from docmanager.common import Role, RoleRecord
from docmanager.errors import DuplicateResource

from .database import Database

LOGGER = logging.getLogger(__name__)


class RoleQueries:
    """Repository for role records."""

    ADD_ROLE = """
        INSERT INTO roles (id, title, access_level) VALUES (?, ?, ?)
        """

    GET_ROLE_BY_TITLE = """
        SELECT id, title FROM roles WHERE title = ?
        """

    LIST_ROLES = """
        SELECT id, title FROM roles ORDER BY access_level
        """

    def __init__(self, database: Database) -> None:
        self.database = database

    async def create(self, role: Role) -> RoleRecord:
        """Persist a new role.

        :param role: The role title to create
        :return: The stored role
        :raises DuplicateResource: If the title already exists
        """
        record = RoleRecord(id=uuid.uuid4().hex, title=role)
        await self.database.write(
            RoleQueries.ADD_ROLE,
            (record.id, str(role), role.access_level),
            duplicate_message="Role already exists",
        )
        LOGGER.info("Created role %s", role)
        return record

    async def get_by_title(self, role: Role) -> RoleRecord | None:
        row = await self.database.fetchone(RoleQueries.GET_ROLE_BY_TITLE, (str(role),))
        if row is None:
            return None
        return RoleRecord(id=row[0], title=Role(row[1]))

    async def ensure(self, role: Role) -> RoleRecord:
        """Return the stored record for ``role``, creating it on first use."""
        existing = await self.get_by_title(role)
        if existing is not None:
            return existing
        try:
            return await self.create(role)
        except DuplicateResource:
            # another request created it between the lookup and the insert
            created = await self.get_by_title(role)
            if created is None:
                raise
            return created

    async def list_all(self) -> list[RoleRecord]:
        rows = await self.database.fetchall(RoleQueries.LIST_ROLES)
        return [RoleRecord(id=row[0], title=Role(row[1])) for row in rows]

    async def count(self) -> int:
        return await self.database.count("roles")
