"""Fundamental identity and document data model for the app."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .passwords import verify_password


class Role(StrEnum):
    """Closed set of role titles, ordered by access level."""

    VIEWER = "viewer"
    STAFF = "staff"
    ADMIN = "admin"

    @property
    def access_level(self) -> int:
        """Integer rank of the role: viewer=0, staff=1, admin=2."""
        return _ACCESS_LEVELS[self]

    def check_permission(self, required_role: Role) -> bool:
        """Check if this role is at least as privileged as the required one.

        :param required_role: The minimum role needed
        :return: True if the current role has permission, False otherwise
        """
        return self.access_level >= required_role.access_level

    @classmethod
    def parse(cls, title: str | None) -> Role | None:
        """Return the role named by ``title`` or None if it is not recognized."""
        if title is None:
            return None
        try:
            return cls(title.strip())
        except ValueError:
            return None


_ACCESS_LEVELS = {Role.VIEWER: 0, Role.STAFF: 1, Role.ADMIN: 2}

DEFAULT_ROLE = Role.VIEWER
ADMIN_ACCESS_LEVEL = Role.ADMIN.access_level


@dataclass(frozen=True)
class RoleRecord:
    """A persisted role.

    :param str id: Stable identifier of the role row
    :param Role title: The role title
    """

    id: str
    title: Role

    @property
    def access_level(self) -> int:
        return self.title.access_level


@dataclass
class User:
    """Data structure representing a stored user.

    The password hash never leaves this object: API responses are built from
    the public fields only.
    """

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    password_hash: str = field(repr=False)
    role: RoleRecord | None
    logged_in: bool = False

    def verify_password(self, password: str) -> bool:
        """Check a cleartext password against the stored hash."""
        return verify_password(password, self.password_hash)


@dataclass
class Document:
    """Data structure representing a stored document."""

    id: str
    title: str
    content: str
    owner_id: Any
    role: RoleRecord | None
    date_created: datetime
    last_modified: datetime


@dataclass(frozen=True)
class Caller:
    """The authenticated principal of a single request.

    :param str id: Id of the calling user
    :param RoleRecord role: Role snapshot carried by the access token
    :param bool logged_in: Session flag as read from storage
    """

    id: str
    role: RoleRecord | None
    logged_in: bool


def canonical_id(value: Any) -> str | None:
    """Reduce an identifier or an embedded record to its string id.

    Accepts plain ids, objects with an ``id`` attribute (users, roles,
    documents) and mappings with an ``id`` or ``_id`` key.
    """
    if value is None:
        return None
    if isinstance(value, dict):
        embedded = value.get("id", value.get("_id"))
        return None if embedded is None else str(embedded)
    embedded = getattr(value, "id", None)
    if embedded is not None:
        return str(embedded)
    return str(value)


def id_eq(first: Any, second: Any) -> bool:
    """Compare two identifiers on their canonical string form.

    Missing identifiers never compare equal.
    """
    first_id = canonical_id(first)
    second_id = canonical_id(second)
    if first_id is None or second_id is None:
        return False
    return first_id == second_id
