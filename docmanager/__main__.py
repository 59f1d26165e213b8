"""Command line entry point: run the API or administer users."""

import argparse
import asyncio
import logging
import os
import sys

import uvicorn

from docmanager import create_app, load_config_from_env
from docmanager.common import Role
from docmanager.config import AppConfig, configure_logging
from docmanager.queries import Database, RoleQueries, UserChanges, UserQueries

LOGGER = logging.getLogger(__name__)


async def list_users(config: AppConfig) -> int:
    """Print every user with their role and session flag."""
    database = await Database.connect(config.db_path)
    try:
        await database.initialize_tables()
        users = await UserQueries(database).list_all()
    finally:
        await database.close()

    if not users:
        print("No users found in database.")  # noqa: T201
        return 0

    for user in users:
        role = user.role.title if user.role else "none"
        level = user.role.access_level if user.role else "N/A"
        print(f"{user.email}")  # noqa: T201
        print(f"    Name: {user.first_name} {user.last_name}")  # noqa: T201
        print(f"    Role: {role} (accessLevel: {level})")  # noqa: T201
        print(f"    Logged In: {user.logged_in}")  # noqa: T201
    print(f"Total users: {len(users)}")  # noqa: T201
    return 0


async def set_role(config: AppConfig, email: str, title: str) -> int:
    """Change the role of the user with the given email."""
    role = Role.parse(title)
    if role is None:
        LOGGER.error("Invalid role %s, expected one of viewer, staff, admin", title)
        return 1

    database = await Database.connect(config.db_path)
    try:
        await database.initialize_tables()
        user_queries = UserQueries(database)
        user = await user_queries.get_by_email(email)
        if user is None:
            LOGGER.error("No user found with email %s", email)
            return 1
        record = await RoleQueries(database).ensure(role)
        await user_queries.update(user.id, UserChanges(role=record))
    finally:
        await database.close()

    print(f"Updated {email} to role {role} (accessLevel: {role.access_level})")  # noqa: T201
    return 0


def main() -> None:
    """Parse arguments and dispatch to the requested command."""
    parser = argparse.ArgumentParser(
        description="Document management service with role-based access control.",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment configuration file.",
    )
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", type=str, default=None, help="Host to bind.")
    serve.add_argument("--port", type=int, default=None, help="Port to bind.")
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development.",
    )

    commands.add_parser("list-users", help="List all users with their roles.")

    set_role_parser = commands.add_parser("set-role", help="Change a user's role.")
    set_role_parser.add_argument("email", type=str, help="Email of the user.")
    set_role_parser.add_argument("role", type=str, help="viewer, staff or admin.")

    args = parser.parse_args()
    config = load_config_from_env(args.env_file)

    if args.command == "list-users":
        configure_logging(config)
        sys.exit(asyncio.run(list_users(config)))

    if args.command == "set-role":
        configure_logging(config)
        sys.exit(asyncio.run(set_role(config, args.email, args.role)))

    host = getattr(args, "host", None) or config.host
    port = getattr(args, "port", None) or config.port
    if getattr(args, "reload", False):
        # reloading needs an import string; create_app reads ENV_FILE
        os.environ["ENV_FILE"] = args.env_file
        uvicorn.run(
            "docmanager:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
        )
        return
    uvicorn.run(create_app(args.env_file), host=host, port=port)


if __name__ == "__main__":
    main()
