"""
Database seeding script for privileged users.

Roles can only be raised by an admin through the API, so the first admin has
to be created here. Run after the database is reachable:

    python -m bookcourier.seed_users admin@bookcourier.com admin
    python -m bookcourier.seed_users librarian@bookcourier.com librarian
"""

import asyncio
import sys

from sqlalchemy import select

from bookcourier.app.db.session import AsyncSessionLocal, engine, Base
from bookcourier.app.models.user import User
from bookcourier.app.models.enums import UserRole
from bookcourier.app.services.identifiers import generate_user_id


async def seed_user(email: str, role: UserRole) -> User:
    """
    Create the user with the given role, or raise an existing user's role.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()

        if user:
            print(f"ℹ️  {email} already exists, setting role to {role.value}")
            user.role = role
        else:
            user = User(user_id=generate_user_id(), email=email.lower(), role=role)
            db.add(user)
            print(f"✅ Created {role.value} user {email}")

        await db.commit()
        await db.refresh(user)
        return user


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("usage: python -m bookcourier.seed_users <email> <user|librarian|admin>")
        return 1

    email, role_name = argv
    try:
        role = UserRole(role_name)
    except ValueError:
        print(f"❌ Unknown role '{role_name}'")
        return 1

    asyncio.run(seed_user(email, role))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
