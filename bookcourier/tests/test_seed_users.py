"""
Seeding script tests.
"""

import pytest
from sqlalchemy import select

import bookcourier.seed_users as seed_users
from bookcourier.app.models.enums import UserRole
from bookcourier.app.models.user import User


@pytest.fixture(autouse=True)
def seed_against_test_db(monkeypatch, db_engine, session_factory):
    monkeypatch.setattr(seed_users, "engine", db_engine)
    monkeypatch.setattr(seed_users, "AsyncSessionLocal", session_factory)


@pytest.mark.asyncio
async def test_seed_creates_admin(db_session):
    await seed_users.seed_user("Root@BookCourier.com", UserRole.ADMIN)

    result = await db_session.execute(select(User).where(User.email == "root@bookcourier.com"))
    assert result.scalar_one().role == UserRole.ADMIN


@pytest.mark.asyncio
async def test_seed_raises_existing_role(make_user, db_session):
    await make_user("reader@test.com", UserRole.USER)

    user = await seed_users.seed_user("reader@test.com", UserRole.LIBRARIAN)
    assert user.role == UserRole.LIBRARIAN

    result = await db_session.execute(select(User))
    assert len(result.scalars().all()) == 1


def test_main_rejects_bad_arguments():
    assert seed_users.main([]) == 1
    assert seed_users.main(["someone@test.com", "superuser"]) == 1
