#!/usr/bin/env python3
"""
Database management script.
Creates and drops tables, and creates or promotes admin users.
"""

import asyncio
import argparse
import getpass
import logging
import sys

from smartrent.config import settings
from smartrent.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from smartrent.models.user import UserRole
from smartrent.services.auth import AuthService
from smartrent.services.identity import create_identity_provider
from smartrent.utils.exceptions import APIException

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ManagementCommands:
    """Operations that run outside the HTTP API."""

    async def create_tables(self) -> None:
        logger.info(f"Creating tables ({settings.environment})")
        await create_tables()

    async def drop_tables(self) -> None:
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def create_admin(self, email: str, password: str, name: str, phone: str = None) -> None:
        """
        Register a new account directly with the admin role.

        Signup over HTTP only offers the user and owner roles, so this is the
        way to bootstrap the first admin.
        """
        async with AsyncSessionLocal() as session:
            auth_service = AuthService(session, create_identity_provider(session))
            user = await auth_service.register(
                email=email,
                password=password,
                name=name,
                phone=phone,
                role=UserRole.ADMIN
            )
            logger.info(f"Admin user created: {user.email} (ID: {user.id})")

    async def promote(self, email: str, role: UserRole) -> None:
        """Change the role of an existing user."""
        async with AsyncSessionLocal() as session:
            auth_service = AuthService(session, create_identity_provider(session))
            user = await auth_service.change_role(email, role)
            logger.info(f"{user.email} is now {user.role.value}")


async def _run(coro) -> None:
    try:
        await coro
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="SmartRent database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")

    drop_parser = subparsers.add_parser("drop-tables", help="Drop all tables (development/testing only)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping all tables")

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin account")
    admin_parser.add_argument("email", help="Admin email address")
    admin_parser.add_argument("--name", default="Administrator", help="Display name")
    admin_parser.add_argument("--phone", default=None, help="Contact phone")
    admin_parser.add_argument("--password", default=None, help="Password (prompted when omitted)")

    promote_parser = subparsers.add_parser("promote", help="Change the role of an existing user")
    promote_parser.add_argument("email", help="User email address")
    promote_parser.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.ADMIN.value,
        help="New role (default: admin)"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    commands = ManagementCommands()

    try:
        if args.command == "create-tables":
            asyncio.run(_run(commands.create_tables()))

        elif args.command == "drop-tables":
            if not args.confirm:
                print("Dropping tables requires --confirm flag")
                return
            asyncio.run(_run(commands.drop_tables()))

        elif args.command == "create-admin":
            password = args.password or getpass.getpass("Password: ")
            asyncio.run(_run(commands.create_admin(args.email, password, args.name, args.phone)))

        elif args.command == "promote":
            asyncio.run(_run(commands.promote(args.email, UserRole(args.role))))

    except APIException as e:
        logger.error(f"{args.command} failed: {e.detail}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
