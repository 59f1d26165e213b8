"""Signup, login, logout and session routes.

Mounted under ``/api/users`` ahead of the user profile routes so that
``/session`` is not taken for a user id.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from docmanager.common import DEFAULT_ROLE, Role
from docmanager.errors import (
    BadCredentials,
    DocManagerError,
    MissingFields,
    UnknownRole,
    UserNotFound,
)
from docmanager.queries import RoleQueries, UserQueries

from .models import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    SessionResponse,
    SignupRequest,
    TokenPayload,
    UserResponse,
)
from .security_manager import SecurityManager
from .validation import Validate, extract_token

LOG = logging.getLogger(__name__)

SIGNUP_FIELDS_MESSAGE = (
    "Please provide the username, firstname, lastname, email, and password values"
)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


async def _signup(
    body: SignupRequest,
    user_queries: UserQueries,
    role_queries: RoleQueries,
    security_manager: SecurityManager,
) -> AuthResponse:
    required = (body.username, body.firstname, body.lastname, body.email)
    if any(_is_blank(value) for value in required) or not body.password:
        raise MissingFields(SIGNUP_FIELDS_MESSAGE)

    role = DEFAULT_ROLE
    if not _is_blank(body.role):
        role = Role.parse(body.role)
        if role is None:
            raise UnknownRole
    role_record = await role_queries.ensure(role)

    user = await user_queries.create(
        username=body.username,
        email=body.email,
        first_name=body.firstname,
        last_name=body.lastname,
        password=body.password,
        role=role_record,
        logged_in=True,
    )

    token = security_manager.create_access_token(user)
    return AuthResponse(user=UserResponse.from_user(user), token=token)


async def _login(
    body: LoginRequest,
    user_queries: UserQueries,
    security_manager: SecurityManager,
) -> AuthResponse:
    if _is_blank(body.username) or not body.password:
        raise MissingFields("Please provide the username and password values")

    user = await user_queries.get_by_username(body.username)
    if user is None:
        raise UserNotFound

    if not await asyncio.to_thread(user.verify_password, body.password):
        LOG.debug("Wrong password for %s", user.username)
        raise BadCredentials

    await user_queries.set_logged_in(user.id, logged_in=True)
    user.logged_in = True

    token = security_manager.create_access_token(user)
    return AuthResponse(user=UserResponse.from_user(user), token=token)


async def _logout(payload: TokenPayload, user_queries: UserQueries) -> MessageResponse:
    await user_queries.set_logged_in(payload.user_id, logged_in=False)
    LOG.debug("User %s logged out", payload.user_id)
    return MessageResponse(message="Successfully logged out")


async def _session(
    token: str | None,
    user_queries: UserQueries,
    security_manager: SecurityManager,
) -> SessionResponse:
    if not token:
        return SessionResponse(logged_in=False)

    try:
        payload = security_manager.verify_token(token)
    except DocManagerError:
        return SessionResponse(logged_in=False)

    user = await user_queries.get(payload.user_id)
    if user is None:
        return SessionResponse(logged_in=False)

    return SessionResponse(logged_in=user.logged_in, user=UserResponse.from_user(user))


def configure_auth_router(
    router: APIRouter,
    user_queries: UserQueries,
    role_queries: RoleQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the signup and session router.

    :param router: The APIRouter to configure
    :param user_queries: User repository
    :param role_queries: Role repository
    :param validate: Request validator dependencies
    :return: The configured APIRouter
    """
    security_manager = validate.security_manager

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def signup(body: SignupRequest) -> AuthResponse:
        return await _signup(body, user_queries, role_queries, security_manager)

    @router.post("/login")
    async def login(body: LoginRequest) -> AuthResponse:
        return await _login(body, user_queries, security_manager)

    @router.post("/logout")
    async def logout(
        payload: Annotated[TokenPayload, Depends(validate.verified_payload)],
    ) -> MessageResponse:
        return await _logout(payload, user_queries)

    @router.get("/session", response_model_exclude_none=True)
    async def session(
        token: Annotated[str | None, Depends(extract_token)],
    ) -> SessionResponse:
        return await _session(token, user_queries, security_manager)

    return router
