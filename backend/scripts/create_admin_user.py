"""
Script to create an admin account for the Citizen Issue Reporter.

Admin is never granted through the API; this script is the only way to
provision one.

Usage:
    python scripts/create_admin_user.py

Environment Variables Required:
    DATABASE_URL - Database connection string
    SECRET_KEY - Application secret key
"""

import asyncio
import sys
from getpass import getpass

from issue_reporter.core.database import AsyncSessionLocal
from issue_reporter.models.auth import UserRole
from issue_reporter.services.accounts import AccountService, DuplicateEmailError


async def create_admin_user():
    """Create an admin account interactively."""
    print("=" * 60)
    print("Citizen Issue Reporter - Admin Account Creation")
    print("=" * 60)
    print()

    email = input("Enter admin email: ").strip()
    if not email:
        print("Error: Email is required")
        sys.exit(1)

    full_name = input("Enter admin full name [default: Administrator]: ").strip() or "Administrator"

    while True:
        password = getpass("Enter admin password: ")
        password_confirm = getpass("Confirm admin password: ")

        if not password:
            print("Error: Password cannot be empty")
            continue

        if password != password_confirm:
            print("Error: Passwords do not match. Please try again.")
            continue

        if len(password) < 8:
            print("Error: Password must be at least 8 characters")
            continue

        break

    print()
    print("Creating admin account...")

    async with AsyncSessionLocal() as db:
        try:
            admin = await AccountService(db).create_account(
                email=email,
                password=password,
                full_name=full_name,
                role=UserRole.ADMIN,
            )
        except DuplicateEmailError:
            print(f"Error: An account for '{email}' already exists")
            sys.exit(1)

    print()
    print("Admin account created successfully!")
    print()
    print(f"Email: {admin.email}")
    print(f"Role: {UserRole(admin.role).value}")
    print(f"ID: {admin.id}")
    print()
    print("You can now login at: POST /api/v1/auth/login")
    print()


if __name__ == "__main__":
    asyncio.run(create_admin_user())
