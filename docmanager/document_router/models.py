"""Request and response bodies for the document endpoints."""

from datetime import datetime

from docmanager.auth.models import CamelModel, RoleResponse
from docmanager.common import Document, canonical_id


class DocumentResponse(CamelModel):
    id: str
    title: str
    content: str
    owner_id: str | None
    role: RoleResponse | None
    date_created: datetime
    last_modified: datetime

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            title=document.title,
            content=document.content,
            owner_id=canonical_id(document.owner_id),
            role=RoleResponse.from_record(document.role) if document.role else None,
            date_created=document.date_created,
            last_modified=document.last_modified,
        )

    @classmethod
    def from_documents(cls, documents: list[Document]) -> list["DocumentResponse"]:
        return [cls.from_document(document) for document in documents]


class DocumentCreateRequest(CamelModel):
    title: str | None = None
    content: str | None = None
    role: str | None = None


class DocumentUpdateRequest(CamelModel):
    """Writable document fields. ``ownerId`` and dates are not among them."""

    title: str | None = None
    content: str | None = None
    role: str | None = None
