"""JWT access token creation and verification.

A token carries a snapshot of the user's id, role and session flag.
"""

import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from pydantic import ValidationError as PydanticValidationError

from docmanager.common import User
from docmanager.errors import TokenExpired, TokenInvalid

from .models import TokenPayload

LOGGER = logging.getLogger(__name__)


@dataclass
class SecurityManager:
    """Signs and verifies access tokens.

    :param str secret_key: Secret key for JWT signing (generated if not provided)
    :param str algorithm: JWT signing algorithm
    :param int expire_minutes: Token lifetime in minutes
    """

    DEFAULT_JWT_ALGORITHM = "HS512"
    DEFAULT_TOKEN_EXPIRE_MINUTES = 60 * 24
    MINIMUM_JWT_SECRET_KEY_LENGTH = 64

    secret_key: str | None = None
    algorithm: str = DEFAULT_JWT_ALGORITHM
    expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES

    def __post_init__(self) -> None:
        """Generate secret key if not provided."""
        if (
            self.secret_key is None
            or len(self.secret_key) < self.MINIMUM_JWT_SECRET_KEY_LENGTH
        ):
            self.secret_key = os.urandom(64).hex()

    def create_access_token(self, user: User) -> str:
        """Create a new JWT access token for a freshly authenticated user.

        :param User user: The user for whom to create the token
        :return: A JWT access token as a string
        """
        issued_at = datetime.now(UTC)
        role = None
        if user.role is not None:
            role = {
                "id": user.role.id,
                "title": str(user.role.title),
                "accessLevel": user.role.access_level,
            }

        payload = {
            "userId": user.id,
            "role": role,
            "loggedIn": True,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> TokenPayload:
        """Verify signature and expiry of a token and return its payload.

        :param token: The JWT token string to verify
        :return: The decoded payload
        :raises TokenExpired: If the token is past its expiry
        :raises TokenInvalid: For any other verification failure
        """
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            LOGGER.debug("Rejected expired token")
            raise TokenExpired from e
        except jwt.InvalidTokenError as e:
            LOGGER.debug("Rejected invalid token: %s", e)
            raise TokenInvalid from e

        return self._to_payload(claims)

    def decode_token(self, token: str) -> TokenPayload:
        """Read a token's payload without checking signature or expiry.

        Only for best-effort identity extraction; never for authorization.

        :raises TokenInvalid: If the token cannot be parsed at all
        """
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise TokenInvalid from e
        return self._to_payload(claims)

    @staticmethod
    def _to_payload(claims: dict[str, Any]) -> TokenPayload:
        try:
            return TokenPayload.model_validate(claims)
        except PydanticValidationError as e:
            LOGGER.debug("Token payload has an unexpected shape: %s", e)
            raise TokenInvalid from e
