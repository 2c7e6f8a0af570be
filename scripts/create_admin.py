"""
Administrator Bootstrap Script

No page creates administrators, so the first one is made here.
Creates the account if the email is unknown, otherwise changes the role
of the existing account (the password is left untouched in that case).

Run from project root:
    python scripts/create_admin.py --username chef --email chef@example.com --password 's3cretpass'
    python scripts/create_admin.py --email someone@example.com --role moderator

Version: 1.0.0
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from menu_app.core.config import get_settings, setup_logging
from menu_app.database import dispose_engine, get_session_maker, init_db
from menu_app.models import User, UserRole
from menu_app.security import hash_password_async


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote a user account")
    parser.add_argument("--email", required=True, help="Account email (used to find existing users)")
    parser.add_argument("--username", help="Username for a new account")
    parser.add_argument("--password", help="Password for a new account")
    parser.add_argument(
        "--role",
        choices=[r.value for r in UserRole],
        default=UserRole.ADMIN.value,
        help="Role to assign (default: admin)",
    )
    return parser.parse_args(argv)


async def create_or_promote(email: str, role: UserRole, username: str = None, password: str = None) -> User:
    """
    Give ``email`` the requested role, creating the account when needed.

    Raises:
        ValueError: New account requested without username or a long enough password
    """
    settings = get_settings()
    email = email.strip().lower()

    async with get_session_maker()() as db:
        user = await db.scalar(select(User).where(User.email == email))

        if user is not None:
            user.role = role
            await db.commit()
            print(f"✅ {user.username} <{user.email}> is now {role.value}")
            return user

        if not username or not password:
            raise ValueError("--username and --password are required to create a new account")
        if len(password) < settings.min_password_length:
            raise ValueError(f"Password must be at least {settings.min_password_length} characters")

        user = User(
            username=username.strip(),
            email=email,
            password=await hash_password_async(password),
            role=role,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        print(f"✅ Created {role.value} {user.username} <{user.email}> (id={user.id})")
        return user


async def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()
    await init_db()
    try:
        await create_or_promote(args.email, UserRole(args.role), args.username, args.password)
    except ValueError as e:
        print(f"❌ {e}")
        return 1
    finally:
        await dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
