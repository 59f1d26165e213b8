"""Role creation and listing routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from docmanager.common import Caller, Role
from docmanager.errors import ValidationError
from docmanager.queries import RoleQueries

from .models import RoleCreateRequest, RoleResponse
from .validation import Validate

LOG = logging.getLogger(__name__)


async def _create_role(body: RoleCreateRequest, role_queries: RoleQueries) -> RoleResponse:
    if body.title is None or not body.title.strip():
        raise ValidationError("The role title is required")

    role = Role.parse(body.title)
    if role is None:
        msg = f"{body.title} is not a valid role title"
        raise ValidationError(msg)

    return RoleResponse.from_record(await role_queries.create(role))


def configure_role_router(
    router: APIRouter,
    role_queries: RoleQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the role router.

    :param router: The APIRouter to configure
    :param role_queries: Role repository
    :param validate: Request validator dependencies
    :return: The configured APIRouter
    """

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_role(
        body: RoleCreateRequest,
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> RoleResponse:
        LOG.debug("User %s creating role %s", caller.id, body.title)
        return await _create_role(body, role_queries)

    @router.get("")
    async def list_roles(
        caller: Annotated[Caller, Depends(validate.caller)],
    ) -> list[RoleResponse]:
        LOG.debug("User %s listing roles", caller.id)
        return [RoleResponse.from_record(role) for role in await role_queries.list_all()]

    return router
