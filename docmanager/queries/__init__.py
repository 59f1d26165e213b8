"""Identity repository: roles, users and documents on SQLite."""

from .database import Database
from .documents import DocumentQueries
from .roles import RoleQueries
from .users import UserChanges, UserQueries

__all__ = [
    "Database",
    "DocumentQueries",
    "RoleQueries",
    "UserChanges",
    "UserQueries",
]
