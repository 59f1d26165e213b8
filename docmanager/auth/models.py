"""Request and response bodies for the user, session and role endpoints.

JSON keys are camelCase on the wire; the models use snake_case attributes.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from docmanager.common import Role, RoleRecord, User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoleResponse(CamelModel):
    id: str
    title: Role
    access_level: int

    @classmethod
    def from_record(cls, record: RoleRecord) -> "RoleResponse":
        return cls(id=record.id, title=record.title, access_level=record.access_level)


class NameResponse(CamelModel):
    first: str
    last: str


class UserResponse(CamelModel):
    """User data returned to clients. There is no password field to leak."""

    id: str
    username: str
    name: NameResponse
    email: str
    role: RoleResponse | None
    logged_in: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            name=NameResponse(first=user.first_name, last=user.last_name),
            email=user.email,
            role=RoleResponse.from_record(user.role) if user.role else None,
            logged_in=user.logged_in,
        )


class AuthResponse(CamelModel):
    user: UserResponse
    token: str


class SessionResponse(CamelModel):
    logged_in: bool
    user: UserResponse | None = None


class MessageResponse(CamelModel):
    message: str


class StatsResponse(CamelModel):
    documents: int
    users: int
    roles: int


class TokenRole(CamelModel):
    id: str
    title: Role
    access_level: int | None = None

    def to_record(self) -> RoleRecord:
        # the level is always derived from the title, never trusted from the claim
        return RoleRecord(id=self.id, title=self.title)


class TokenPayload(CamelModel):
    """Claims carried by an access token."""

    user_id: str
    role: TokenRole | None = None
    logged_in: bool
    iat: datetime
    exp: datetime


class SignupRequest(CamelModel):
    username: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(CamelModel):
    username: str | None = None
    password: str | None = None


class UserUpdateRequest(CamelModel):
    username: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class RoleCreateRequest(CamelModel):
    title: str | None = None
