"""Common data models and utilities for the application."""

from .passwords import hash_password, verify_password
from .user import (
    ADMIN_ACCESS_LEVEL,
    DEFAULT_ROLE,
    Caller,
    Document,
    Role,
    RoleRecord,
    User,
    canonical_id,
    id_eq,
)

__all__ = [
    "ADMIN_ACCESS_LEVEL",
    "DEFAULT_ROLE",
    "Caller",
    "Document",
    "Role",
    "RoleRecord",
    "User",
    "canonical_id",
    "hash_password",
    "id_eq",
    "verify_password",
]
