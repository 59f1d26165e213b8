"""All authentication and authorization modules and routes."""

from . import policies
from .auth_routes import configure_auth_router
from .role_routes import configure_role_router
from .security_manager import SecurityManager
from .validation import Validate, extract_token

__all__ = [
    "SecurityManager",
    "Validate",
    "configure_auth_router",
    "configure_role_router",
    "extract_token",
    "policies",
]
