#!/usr/bin/env python3
"""
Create Admin Script

Creates the library's admin account, or promotes and resets it if a user
with that username or email already exists.

USAGE:
    # From the project root with the virtualenv active
    python scripts/create_admin.py
    python scripts/create_admin.py --username librarian --email librarian@library.com

The password is read from --password, then ADMIN_PASSWORD, and is
prompted for when neither is set.
"""

import argparse
import getpass
import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import or_, select

from catalogue.config import get_settings
from catalogue.database import Database
from catalogue.models import User
from catalogue.services.security import hash_password


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote the admin user.")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", default="admin@library.com")
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    return parser.parse_args()


def create_admin(
    database: Database,
    username: str,
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "User",
) -> User:
    """
    Create the admin user, or update an existing one in place.

    An existing account matched by username or email keeps its id (and
    its borrowings) but gets the new password and admin rights.
    """
    with database.session() as db:
        user = db.execute(
            select(User).where(or_(User.username == username, User.email == email))
        ).scalars().first()

        if user is None:
            user = User(username=username, email=email)
            db.add(user)
            print(f"Creating admin user '{username}'...")
        else:
            print(f"User '{user.username}' already exists. Updating to admin...")

        user.hashed_password = hash_password(password)
        user.first_name = first_name
        user.last_name = last_name
        user.is_admin = True
        user.is_active = True

        db.commit()
        db.refresh(user)
        return user


def main() -> None:
    args = parse_args()
    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters long.")
        sys.exit(1)

    settings = get_settings()
    database = Database(settings.database_url)

    try:
        if not database.ping():
            print("Database connection failed.")
            sys.exit(1)

        database.create_tables()
        user = create_admin(
            database,
            username=args.username.lower(),
            email=args.email,
            password=password,
            first_name=args.first_name,
            last_name=args.last_name,
        )

        print("=" * 60)
        print("Admin user ready")
        print("=" * 60)
        print(f"  - Username: {user.username}")
        print(f"  - Email: {user.email}")
        print(f"  - Admin: {user.is_admin}")
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
