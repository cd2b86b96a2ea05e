#!/usr/bin/env python3
"""
Grant or revoke the admin role
==============================
Users are created on first OAuth login with the ``user`` role. Run this
against the same DATABASE_URL as the API to change a user's role.

Usage:
    python scripts/promote_admin.py author@example.com [--revoke] [--dry-run]
"""

import argparse
import sys

from blogapi.database import SessionLocal, transaction
from blogapi.models.user import ROLE_ADMIN, ROLE_USER
from blogapi.repositories import UserRepository


def set_admin(email: str, revoke: bool = False, dry_run: bool = False) -> int:
    """Change the role of the user with ``email``. Returns a process exit code."""
    role = ROLE_USER if revoke else ROLE_ADMIN

    db = SessionLocal()
    try:
        users = UserRepository(db)
        user = users.get_by_email(email)
        if user is None:
            print(f"No user with email {email}. They must sign in once before being promoted.")
            return 1

        if user.role == role:
            print(f"✓ {email} already has role '{role}'")
            return 0

        if dry_run:
            print(f"[DRY RUN] Would change {email}: '{user.role}' -> '{role}'")
            return 0

        with transaction(db):
            users.set_role(user, role)
        print(f"✓ {email} now has role '{role}'")
        return 0
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Grant or revoke the blog admin role")
    parser.add_argument("email", help="Email of an existing user")
    parser.add_argument(
        "--revoke",
        action="store_true",
        help="Demote the user back to a regular reader"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would change without writing"
    )
    args = parser.parse_args()

    sys.exit(set_admin(args.email, args.revoke, args.dry_run))


if __name__ == "__main__":
    main()
