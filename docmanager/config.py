"""Configuration management for the document service.

This module provides utilities for loading and validating configuration
from environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from dotenv import load_dotenv

from docmanager.auth import SecurityManager

LOGGER = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "test", "production")
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")

_ENVIRONMENT_LOG_LEVELS = {
    "development": logging.DEBUG,
    "test": logging.WARNING,
    "production": logging.INFO,
}


def configure_logging(app_config: AppConfig) -> None:
    """Configure logging based on the application configuration.

    An explicit ``LOGGING_LEVEL`` wins over the environment's default level.

    :param app_config: The application configuration instance
    """
    default_level = _ENVIRONMENT_LOG_LEVELS[app_config.environment]
    if not app_config.logging_level:
        logging.basicConfig(level=default_level, force=True)
        return

    numeric_level = getattr(logging, app_config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", app_config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, force=True)


@dataclass
class AppConfig:
    """Application configuration loaded from environment variables.

    All fields are initialized from environment variables using field creators.

    **Usage:**

    .. code-block:: python

        config = load_config_from_env(".env")
        app = configure_fastapi_app(config)
    """

    DEFAULT_DATABASE_PATH: ClassVar[str] = "docmanager.db"
    DEFAULT_PORT: ClassVar[int] = 8000
    MINIMUM_JWT_SECRET_KEY_LENGTH: ClassVar[int] = 64
    DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES: ClassVar[int] = 60 * 24

    environment: str = field(
        default_factory=lambda: os.getenv("APP_ENV", "development"),
    )

    # Database configuration
    db_path: str = field(
        default_factory=lambda: os.getenv(
            "DATABASE_PATH",
            AppConfig.DEFAULT_DATABASE_PATH,
        ),
    )

    # Logging configuration
    logging_level: str | None = field(
        default_factory=lambda: os.getenv("LOGGING_LEVEL"),
    )

    # Server configuration
    host: str = field(
        default_factory=lambda: os.getenv("HOST", "127.0.0.1"),
    )
    port: int = field(
        default_factory=lambda: AppConfig._getenv_int_required(
            "PORT",
            AppConfig.DEFAULT_PORT,
        ),
    )
    root_path: str = field(
        default_factory=lambda: os.getenv("ROOT_PATH", ""),
    )

    # Security configuration
    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET", ""),
    )

    algorithm: str = field(
        default_factory=lambda: os.getenv("ALGORITHM", "HS512"),
    )

    access_token_expire_minutes: int = field(
        default_factory=lambda: AppConfig._getenv_int_required(
            "ACCESS_TOKEN_EXPIRE_MINUTES",
            AppConfig.DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES,
        ),
    )

    def __post_init__(self) -> None:
        """Post-initialization validation."""
        if self.environment not in ENVIRONMENTS:
            msg = f"APP_ENV must be one of {', '.join(ENVIRONMENTS)}"
            raise ValueError(msg)
        if self.algorithm not in HMAC_ALGORITHMS:
            msg = f"ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)}"
            raise ValueError(msg)
        if self.access_token_expire_minutes <= 0:
            msg = "ACCESS_TOKEN_EXPIRE_MINUTES must be a positive integer"
            raise ValueError(msg)
        if len(self.secret_key) < self.MINIMUM_JWT_SECRET_KEY_LENGTH:
            LOGGER.warning(
                "SECRET is not set or too short, generating a random key",
            )
            self.secret_key = os.urandom(self.MINIMUM_JWT_SECRET_KEY_LENGTH).hex()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def security_manager(self) -> SecurityManager:
        """Create a SecurityManager instance from this configuration.

        :return: Configured SecurityManager instance
        :rtype: SecurityManager
        """
        return SecurityManager(
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expire_minutes=self.access_token_expire_minutes,
        )

    @staticmethod
    def _getenv_int_required(key: str, default: int) -> int:
        """Get an integer environment variable with a default.

        :param key: Environment variable name
        :type key: str
        :param default: Default value if not set
        :type default: int
        :return: The environment variable value as integer or default
        :rtype: int
        :raises ValueError: If value cannot be converted to int
        """
        value_str = os.getenv(key)

        if value_str is None or value_str == "":
            return default

        try:
            return int(value_str)
        except ValueError as e:
            msg = f"Environment variable {key} must be an integer, got: {value_str}"
            raise ValueError(msg) from e


def load_config_from_env(env_file: str | Path | None = None) -> AppConfig:
    """Load application configuration from environment variables.

    The env file is read in every environment except production, where the
    process environment is expected to be complete.

    :param env_file: Optional path to a .env file
    :return: An AppConfig instance populated with environment variable values
    """
    if env_file and os.getenv("APP_ENV") != "production":
        if Path(env_file).exists():
            LOGGER.info("Loading environment variables from %s", env_file)
            load_dotenv(dotenv_path=env_file)
        else:
            LOGGER.debug("No .env file found at %s", env_file)

    return AppConfig()
