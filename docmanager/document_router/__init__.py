"""Document endpoints."""

from .router import configure_document_router

__all__ = ["configure_document_router"]
