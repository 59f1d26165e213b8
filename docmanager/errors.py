"""Error taxonomy for the document service and its HTTP mapping.

Every failure a handler can report is a subclass of :class:`DocManagerError`
carrying its own status code. The FastAPI boundary turns them into
``{"error": <message>}`` JSON bodies.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

LOGGER = logging.getLogger(__name__)


class DocManagerError(Exception):
    """Base class for errors reported to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DocManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class MissingFields(ValidationError):
    default_message = "Required fields are missing"


class DuplicateResource(DocManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class UnknownRole(DocManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Role not found"


class NotFound(DocManagerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not Found"


class NoToken(DocManagerError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "No token provided."


class TokenInvalid(DocManagerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Failed to authenticate token."


class TokenExpired(TokenInvalid):
    """Expired tokens share the invalid-token message at the boundary."""


class NotLoggedIn(DocManagerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized Access. Please login first"


class Forbidden(DocManagerError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized Access"


class AuthFailed(DocManagerError):
    """Login failed for one of the reasons below."""


class BadCredentials(AuthFailed):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed. Wrong password."


class UserNotFound(AuthFailed):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Authentication failed. User Not Found."


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _handle_service_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, DocManagerError)  # noqa: S101
    return _error_response(exc.status_code, exc.message)


async def _handle_validation_error(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)  # noqa: S101
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    message = "Invalid request"
    if details:
        message = f"Invalid request: {'; '.join(details)}"
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def _handle_http_exception(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)  # noqa: S101
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application.

    :param app: The FastAPI application
    """
    app.add_exception_handler(DocManagerError, _handle_service_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
