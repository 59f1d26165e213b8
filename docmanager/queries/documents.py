"""Queries for the documents table."""

import logging
import uuid
from datetime import datetime

from docmanager.common import Document, Role, RoleRecord

from .database import Database, from_timestamp, to_timestamp, utc_now

LOGGER = logging.getLogger(__name__)

DUPLICATE_DOCUMENT_MESSAGE = "Document already exists"


class DocumentQueries:
    """Repository for document records."""

    SELECT_DOCUMENT = """
        SELECT d.id, d.title, d.content, d.owner_id, r.id, r.title,
               d.date_created, d.last_modified
        FROM documents d LEFT JOIN roles r ON r.id = d.role_id
        """

    ADD_DOCUMENT = """
        INSERT INTO documents (
            id, title, content, owner_id, role_id, date_created, last_modified
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """

    DELETE_DOCUMENT = """
        DELETE FROM documents WHERE id = ?
        """

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _row_to_document(row: tuple) -> Document:
        role = None
        if row[4] is not None:
            role = RoleRecord(id=row[4], title=Role(row[5]))
        return Document(
            id=row[0],
            title=row[1],
            content=row[2],
            owner_id=row[3],
            role=role,
            date_created=from_timestamp(row[6]),
            last_modified=from_timestamp(row[7]),
        )

    async def create(  # noqa: PLR0913
        self,
        title: str,
        content: str,
        owner_id: str,
        role: RoleRecord,
        created_at: datetime | None = None,
    ) -> Document:
        """Create a document.

        :param title: Unique, non-empty title
        :param content: Document body
        :param owner_id: Id of the creating user
        :param role: Minimum role required to read the document
        :param created_at: Creation time, defaults to now
        :return: The stored document
        :raises DuplicateResource: If the title is taken
        """
        moment = created_at or utc_now()
        document = Document(
            id=uuid.uuid4().hex,
            title=title,
            content=content,
            owner_id=owner_id,
            role=role,
            date_created=moment,
            last_modified=moment,
        )
        stamp = to_timestamp(moment)
        await self.database.write(
            DocumentQueries.ADD_DOCUMENT,
            (document.id, title, content, owner_id, role.id, stamp, stamp),
            duplicate_message=DUPLICATE_DOCUMENT_MESSAGE,
        )
        return document

    async def get(self, document_id: str) -> Document | None:
        row = await self.database.fetchone(
            DocumentQueries.SELECT_DOCUMENT + " WHERE d.id = ?",
            (document_id,),
        )
        return None if row is None else self._row_to_document(row)

    async def update(
        self,
        document_id: str,
        title: str | None = None,
        content: str | None = None,
        role: RoleRecord | None = None,
    ) -> Document | None:
        """Overwrite the given fields of a document and touch ``last_modified``.

        The owner and creation date are never written here.

        :return: The updated document, or None if it does not exist
        :raises DuplicateResource: If the new title is taken
        """
        assignments = ["last_modified = ?"]
        params: list[object] = [to_timestamp(utc_now())]

        if title is not None:
            assignments.append("title = ?")
            params.append(title)
        if content is not None:
            assignments.append("content = ?")
            params.append(content)
        if role is not None:
            assignments.append("role_id = ?")
            params.append(role.id)

        query = f"UPDATE documents SET {', '.join(assignments)} WHERE id = ?"  # noqa: S608
        updated = await self.database.write(
            query,
            (*params, document_id),
            duplicate_message=DUPLICATE_DOCUMENT_MESSAGE,
        )
        if not updated:
            return None
        return await self.get(document_id)

    async def delete(self, document_id: str) -> int:
        """Delete a document.

        :return: Number of rows deleted
        """
        return await self.database.write(
            DocumentQueries.DELETE_DOCUMENT,
            (document_id,),
        )

    async def list_recent(
        self,
        limit: int | None = None,
        *,
        role: RoleRecord | None = None,
        owner_id: str | None = None,
    ) -> list[Document]:
        """List documents most recent first.

        :param limit: Maximum number of documents, None for all of them
        :param role: Only documents requiring this role
        :param owner_id: Only documents owned by this user
        """
        conditions: list[str] = []
        params: list[object] = []
        if role is not None:
            conditions.append("d.role_id = ?")
            params.append(role.id)
        if owner_id is not None:
            conditions.append("d.owner_id = ?")
            params.append(owner_id)

        where_clause = " WHERE " + " AND ".join(conditions) if conditions else ""
        query = (
            DocumentQueries.SELECT_DOCUMENT
            + where_clause
            + " ORDER BY d.date_created DESC, d.rowid DESC LIMIT ?"
        )
        # a negative LIMIT means no limit in SQLite
        rows = await self.database.fetchall(
            query,
            (*params, -1 if limit is None else limit),
        )
        return [self._row_to_document(row) for row in rows]

    async def list_created_between(
        self,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[Document]:
        """List documents with ``start <= date_created < end``, most recent first."""
        rows = await self.database.fetchall(
            DocumentQueries.SELECT_DOCUMENT
            + " WHERE d.date_created >= ? AND d.date_created < ?"
            + " ORDER BY d.date_created DESC, d.rowid DESC LIMIT ?",
            (to_timestamp(start), to_timestamp(end), limit),
        )
        return [self._row_to_document(row) for row in rows]

    async def count(self) -> int:
        return await self.database.count("documents")
