"""Utility script to seed the roles and a first super administrator."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from minicrm.application.use_cases.users import create_user
from minicrm.domain.entities import ROLE_SUPER_ADMIN
from minicrm.infrastructure.database import SessionLocal, initialize_database
from minicrm.infrastructure.repositories import RoleRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create the initial super administrator for Mini CRM.",
    )
    parser.add_argument("--first-name", default="Super", help="First name (default: Super)")
    parser.add_argument("--last-name", default="Admin", help="Last name (default: Admin)")
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Login email (default: admin@example.com)",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Password for the account. Prompted interactively when omitted.",
    )
    return parser.parse_args()


def main() -> None:
    """Create the roles and the super administrator from the command line arguments."""

    args = parse_args()

    password = args.password or getpass("Password for the new user: ")
    if not password:
        raise SystemExit("No password was provided.")

    initialize_database()

    session = SessionLocal()
    try:
        RoleRepository(session).ensure_default_roles()
        user = create_user(
            session,
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
            password=password,
            role_alias=ROLE_SUPER_ADMIN,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the user: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not store the user in the database: {exc}") from exc
    else:
        print(
            "User created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.full_name}\n"
            f"  Email: {user.email}\n"
            f"  Role: {user.role.alias}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
