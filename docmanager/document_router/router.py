"""Router for document creation, retrieval, update and deletion."""

import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from docmanager.auth import Validate, policies
from docmanager.common import DEFAULT_ROLE, Caller, Document, Role, RoleRecord
from docmanager.errors import Forbidden, NotFound, UnknownRole, ValidationError
from docmanager.queries import DocumentQueries, RoleQueries

from .models import DocumentCreateRequest, DocumentResponse, DocumentUpdateRequest

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
DATE_FORMAT_MESSAGE = "Date must be in the format YYYY-MM-DD"
TITLE_REQUIRED_MESSAGE = "The document title is required"


def parse_limit(limit: str | None) -> int:
    """Read a ``limit`` query value, falling back to the default."""
    try:
        value = int(limit) if limit is not None else DEFAULT_LIMIT
    except ValueError:
        return DEFAULT_LIMIT
    return value if value > 0 else DEFAULT_LIMIT


def parse_day(value: str) -> tuple[datetime, datetime]:
    """Turn ``YYYY-M-D`` into the UTC range ``[day, day + 1)``.

    :raises ValidationError: If the value is not a real calendar date
    """
    match = DATE_PATTERN.match(value)
    if match is None:
        raise ValidationError(DATE_FORMAT_MESSAGE)
    year, month, day = (int(part) for part in match.groups())
    try:
        start = datetime(year, month, day, tzinfo=UTC)
    except ValueError as e:
        raise ValidationError(DATE_FORMAT_MESSAGE) from e
    return start, start + timedelta(days=1)


async def _resolve_role(role_queries: RoleQueries, title: str | None) -> RoleRecord:
    if title is None or not title.strip():
        return await role_queries.ensure(DEFAULT_ROLE)
    role = Role.parse(title)
    if role is None:
        raise UnknownRole
    return await role_queries.ensure(role)


async def _load_document(document_queries: DocumentQueries, document_id: str) -> Document:
    document = await document_queries.get(document_id)
    if document is None:
        raise NotFound("Document not found")
    return document


async def _create_document(
    body: DocumentCreateRequest,
    caller: Caller,
    document_queries: DocumentQueries,
    role_queries: RoleQueries,
) -> DocumentResponse:
    if body.title is None or not body.title.strip():
        raise ValidationError(TITLE_REQUIRED_MESSAGE)

    role = await _resolve_role(role_queries, body.role)
    document = await document_queries.create(
        title=body.title,
        content=body.content or "",
        owner_id=caller.id,
        role=role,
    )
    LOGGER.debug("User %s created document %s", caller.id, document.id)
    return DocumentResponse.from_document(document)


async def _update_document(
    document_id: str,
    body: DocumentUpdateRequest,
    caller: Caller,
    document_queries: DocumentQueries,
    role_queries: RoleQueries,
) -> DocumentResponse:
    document = await _load_document(document_queries, document_id)
    if not policies.can_modify(caller, document):
        raise Forbidden("You are not allowed to access this document")

    if body.title is not None and not body.title.strip():
        raise ValidationError(TITLE_REQUIRED_MESSAGE)

    role = None
    if body.role is not None:
        role = await _resolve_role(role_queries, body.role)

    updated = await document_queries.update(
        document_id,
        title=body.title,
        content=body.content,
        role=role,
    )
    if updated is None:
        raise NotFound("Document not found")
    return DocumentResponse.from_document(updated)


def configure_document_router(
    router: APIRouter,
    document_queries: DocumentQueries,
    role_queries: RoleQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the document router.

    :param router: The APIRouter to configure
    :param document_queries: Document repository
    :param role_queries: Role repository
    :param validate: Request validator dependencies
    :return: The configured APIRouter
    """

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_document(
        body: DocumentCreateRequest,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> DocumentResponse:
        return await _create_document(body, caller, document_queries, role_queries)

    @router.get("")
    async def list_documents(
        caller: Annotated[Caller, Depends(validate.caller)],
        limit: str | None = None,
    ) -> list[DocumentResponse]:
        documents = await document_queries.list_recent(parse_limit(limit))
        return DocumentResponse.from_documents(
            policies.visible_documents(caller, documents),
        )

    @router.get("/roles/{role}")
    async def list_documents_by_role(
        role: str,
        caller: Annotated[Caller, Depends(validate.caller)],
        limit: str | None = None,
    ) -> list[DocumentResponse]:
        parsed = Role.parse(role)
        record = await role_queries.get_by_title(parsed) if parsed else None
        if record is None:
            raise UnknownRole
        documents = await document_queries.list_recent(parse_limit(limit), role=record)
        return DocumentResponse.from_documents(
            policies.visible_documents(caller, documents),
        )

    @router.get("/created/{date}")
    async def list_documents_by_date(
        date: str,
        caller: Annotated[Caller, Depends(validate.caller)],
        limit: str | None = None,
    ) -> list[DocumentResponse]:
        start, end = parse_day(date)
        documents = await document_queries.list_created_between(
            start,
            end,
            parse_limit(limit),
        )
        return DocumentResponse.from_documents(
            policies.visible_documents(caller, documents),
        )

    @router.get("/{document_id}")
    async def get_document(
        document_id: str,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> DocumentResponse:
        document = await _load_document(document_queries, document_id)
        if not policies.can_read(caller, document):
            LOGGER.debug("Read of %s denied for %s", document_id, caller.id)
            raise Forbidden("You are not allowed to access this document")
        return DocumentResponse.from_document(document)

    @router.put("/{document_id}")
    async def update_document(
        document_id: str,
        body: DocumentUpdateRequest,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> DocumentResponse:
        return await _update_document(
            document_id,
            body,
            caller,
            document_queries,
            role_queries,
        )

    @router.delete(
        "/{document_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
    )
    async def delete_document(
        document_id: str,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> Response:
        document = await _load_document(document_queries, document_id)
        if not policies.can_delete(caller, document):
            LOGGER.debug("Delete of %s denied for %s", document_id, caller.id)
            raise Forbidden("You are not allowed to delete this document")
        if not await document_queries.delete(document_id):
            raise NotFound("Document not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
