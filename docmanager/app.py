"""FastAPI application factory for the document service."""

import logging
import os
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from docmanager.auth import Validate, configure_auth_router, configure_role_router
from docmanager.auth.validation import TOKEN_HEADER
from docmanager.config import AppConfig, configure_logging, load_config_from_env
from docmanager.document_router import configure_document_router
from docmanager.errors import register_exception_handlers
from docmanager.queries import Database, DocumentQueries, RoleQueries, UserQueries
from docmanager.user_router import configure_stats_router, configure_user_router

LOGGER = logging.getLogger(__name__)

GZIP_MINIMUM_SIZE = 1000


def _include_routers(app: FastAPI, database: Database, config: AppConfig) -> None:
    user_queries = UserQueries(database)
    role_queries = RoleQueries(database)
    document_queries = DocumentQueries(database)

    validate = Validate(user_queries, config.security_manager)

    auth_router = configure_auth_router(
        APIRouter(),
        user_queries,
        role_queries,
        validate,
    )
    user_router = configure_user_router(
        APIRouter(),
        user_queries,
        role_queries,
        document_queries,
        validate,
    )
    role_router = configure_role_router(APIRouter(), role_queries, validate)
    document_router = configure_document_router(
        APIRouter(),
        document_queries,
        role_queries,
        validate,
    )
    stats_router = configure_stats_router(
        APIRouter(),
        user_queries,
        role_queries,
        document_queries,
        validate,
    )

    # session/login/logout must be matched before /api/users/{user_id}
    app.include_router(auth_router, prefix="/api/users", tags=["auth"])
    app.include_router(user_router, prefix="/api/users", tags=["users"])
    app.include_router(role_router, prefix="/api/roles", tags=["roles"])
    app.include_router(document_router, prefix="/api/documents", tags=["documents"])
    app.include_router(stats_router, prefix="/api/stats", tags=["stats"])


def configure_fastapi_app(config: AppConfig) -> FastAPI:
    """Configure and return the FastAPI application.

    :param config: Application configuration
    :return: Configured FastAPI application
    """
    configure_logging(config)

    if not Path(config.db_path).parent.exists():
        Path(config.db_path).parent.mkdir(parents=True, exist_ok=True)
        LOGGER.info(
            "Created directory for database at %s",
            Path(config.db_path).parent,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[Any, Any]:
        """Application lifespan manager.

        Opens the database, wires the routers and closes the database on
        shutdown.
        """
        LOGGER.info("Document service is starting (%s)", config.environment)

        database = await Database.connect(config.db_path)
        try:
            await database.initialize_tables()
            _include_routers(app, database, config)
            yield
        finally:
            await database.close()
            LOGGER.info("Document service is shutting down")

    app = FastAPI(
        title="Document Manager API",
        version="0.1.0",
        lifespan=lifespan,
        root_path=config.root_path,
    )

    register_exception_handlers(app)

    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=[
            "Origin",
            "X-Requested-With",
            "Content-Type",
            "Accept",
            TOKEN_HEADER,
        ],
    )

    if not config.is_production:

        @app.middleware("http")
        async def log_requests(
            request: Request,
            call_next: Callable[[Request], Awaitable[Response]],
        ) -> Response:
            started = time.perf_counter()
            response = await call_next(request)
            LOGGER.info(
                "%s %s %d %.1fms",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response

    @app.get("/")
    def read_root() -> str:
        return "Document Manager API"

    return app


def create_app(env_file: str | None = os.environ.get("ENV_FILE", ".env")) -> FastAPI:
    """Create and configure the FastAPI application.

    The default here is for uvicorn command line usage, in which case the user
    should set ENV_FILE environment variable if they want a different file.

    :param env_file: Optional path to the environment configuration file
    :return: Configured FastAPI application
    """
    config = load_config_from_env(env_file)
    return configure_fastapi_app(config)
