"""Router for user profiles, a user's documents and the admin statistics."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from docmanager.auth import Validate, policies
from docmanager.auth.models import StatsResponse, UserResponse, UserUpdateRequest
from docmanager.common import Caller, Role
from docmanager.document_router.models import DocumentResponse
from docmanager.errors import Forbidden, NotFound, UnknownRole, ValidationError
from docmanager.queries import DocumentQueries, RoleQueries, UserChanges, UserQueries

LOGGER = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized Access"


async def _changes_from_request(
    body: UserUpdateRequest,
    caller: Caller,
    role_queries: RoleQueries,
) -> UserChanges:
    for field_name in ("username", "firstname", "lastname", "email"):
        value = getattr(body, field_name)
        if value is not None and not value.strip():
            msg = f"The {field_name} field cannot be empty"
            raise ValidationError(msg)
    if body.password is not None and not body.password:
        msg = "The password field cannot be empty"
        raise ValidationError(msg)

    changes = UserChanges(
        username=body.username,
        email=body.email,
        first_name=body.firstname,
        last_name=body.lastname,
        password=body.password,
    )

    if body.role is not None:
        if not policies.can_change_role(caller):
            LOGGER.debug("Role change denied for %s", caller.id)
            raise Forbidden(UNAUTHORIZED_MESSAGE)
        role = Role.parse(body.role)
        if role is None:
            raise UnknownRole
        changes.role = await role_queries.ensure(role)

    return changes


async def _update_user(
    user_id: str,
    body: UserUpdateRequest,
    caller: Caller,
    user_queries: UserQueries,
    role_queries: RoleQueries,
) -> UserResponse:
    if not policies.can_modify_user_profile(caller, user_id):
        raise Forbidden(UNAUTHORIZED_MESSAGE)

    if await user_queries.get(user_id) is None:
        raise NotFound("User not found")

    changes = await _changes_from_request(body, caller, role_queries)
    user = await user_queries.update(user_id, changes)
    if user is None:
        raise NotFound("User not found")
    return UserResponse.from_user(user)


def configure_user_router(  # noqa: PLR0913
    router: APIRouter,
    user_queries: UserQueries,
    role_queries: RoleQueries,
    document_queries: DocumentQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the user profile router.

    :param router: The APIRouter to configure
    :param user_queries: User repository
    :param role_queries: Role repository
    :param document_queries: Document repository
    :param validate: Request validator dependencies
    :return: The configured APIRouter
    """

    @router.get("")
    async def list_users(
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> list[UserResponse]:
        if not policies.can_list_users(caller):
            raise Forbidden(UNAUTHORIZED_MESSAGE)
        return [UserResponse.from_user(user) for user in await user_queries.list_all()]

    @router.get("/{user_id}")
    async def get_user(
        user_id: str,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> UserResponse:
        if not policies.can_view_user_profile(caller, user_id):
            raise Forbidden(UNAUTHORIZED_MESSAGE)
        user = await user_queries.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return UserResponse.from_user(user)

    @router.put("/{user_id}")
    async def update_user(
        user_id: str,
        body: UserUpdateRequest,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> UserResponse:
        return await _update_user(user_id, body, caller, user_queries, role_queries)

    @router.delete(
        "/{user_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
    )
    async def delete_user(
        user_id: str,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> Response:
        if not policies.can_delete_user(caller, user_id):
            raise Forbidden(UNAUTHORIZED_MESSAGE)
        if not await user_queries.delete(user_id):
            raise NotFound("User not found")
        LOGGER.info("User %s deleted by %s", user_id, caller.id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/{user_id}/documents")
    async def get_user_documents(
        user_id: str,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> list[DocumentResponse]:
        documents = await document_queries.list_recent(owner_id=user_id)
        return DocumentResponse.from_documents(
            policies.visible_documents(caller, documents),
        )

    return router


def configure_stats_router(
    router: APIRouter,
    user_queries: UserQueries,
    role_queries: RoleQueries,
    document_queries: DocumentQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the admin statistics router."""

    @router.get("")
    async def stats(
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> StatsResponse:
        if not policies.can_get_stats(caller):
            raise Forbidden(UNAUTHORIZED_MESSAGE)
        return StatsResponse(
            documents=await document_queries.count(),
            users=await user_queries.count(),
            roles=await role_queries.count(),
        )

    return router
