"""FastAPI dependencies that authenticate the caller of a request."""

import json
import logging
from typing import Annotated

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from docmanager.common import Caller
from docmanager.errors import NoToken, NotLoggedIn, TokenInvalid
from docmanager.queries import UserQueries

from .models import TokenPayload
from .security_manager import SecurityManager

TOKEN_HEADER = "x-access-token"
TOKEN_BODY_FIELD = "token"

token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)

LOGGER = logging.getLogger(__name__)


async def extract_token(
    request: Request,
    header_token: Annotated[str | None, Security(token_header)] = None,
) -> str | None:
    """Find the bearer token in the header, falling back to the JSON body."""
    if header_token:
        return header_token

    body = await request.body()
    if not body:
        return None
    try:
        parsed = json.loads(body)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    token = parsed.get(TOKEN_BODY_FIELD)
    return token if isinstance(token, str) and token else None


class Validate:
    """Holds validator dependencies for FastAPI authentication."""

    def __init__(
        self,
        user_queries: UserQueries,
        security_manager: SecurityManager,
    ) -> None:
        """Create a new validator instance.

        :param user_queries: User repository, consulted for the session flag
        :param security_manager: JWT security manager
        """
        self.user_queries = user_queries
        self.security_manager = security_manager

    def verified_payload(
        self,
        token: Annotated[str | None, Depends(extract_token)],
    ) -> TokenPayload:
        """Require a token with a valid signature and expiry."""
        if not token:
            raise NoToken
        return self.security_manager.verify_token(token)

    async def caller(
        self,
        token: Annotated[str | None, Depends(extract_token)],
    ) -> Caller:
        """Authenticate the request and build its caller identity.

        The token must verify and claim a logged-in session, and the stored
        user must still exist with its session flag set.
        """
        payload = self.verified_payload(token)

        if not payload.logged_in:
            LOGGER.debug("Token for user %s is not logged in", payload.user_id)
            raise NotLoggedIn

        user = await self.user_queries.get(payload.user_id)
        if user is None:
            LOGGER.debug("Token refers to missing user %s", payload.user_id)
            raise TokenInvalid
        if not user.logged_in:
            LOGGER.debug("User %s has logged out", payload.user_id)
            raise NotLoggedIn

        return Caller(
            id=payload.user_id,
            role=payload.role.to_record() if payload.role else None,
            logged_in=user.logged_in,
        )
