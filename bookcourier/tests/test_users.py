"""
User registration and role management tests.
"""

import pytest
from sqlalchemy import select

from bookcourier.app.models.user import User
from bookcourier.app.models.enums import UserRole


@pytest.mark.asyncio
async def test_first_sign_in_creates_user(client, db_session):
    response = await client.post("/users", json={
        "name": "Ada Reader",
        "email": "Ada@Test.com",
        "photoURL": "https://img.test/ada.png"
    })
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["insertedId"] is not None

    result = await db_session.execute(select(User).where(User.email == "ada@test.com"))
    user = result.scalar_one()
    assert user.role == UserRole.USER
    assert user.photo_url == "https://img.test/ada.png"
    assert user.user_id.startswith("USER-")


@pytest.mark.asyncio
async def test_second_sign_in_is_a_no_op(client, db_session):
    await client.post("/users", json={"name": "Ada", "email": "ada@test.com"})
    response = await client.post("/users", json={"name": "Ada Again", "email": "ada@test.com"})

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["message"] == "User already exists"

    result = await db_session.execute(select(User))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_registration_requires_valid_email(client):
    response = await client.post("/users", json={"name": "Nobody", "email": "not-an-email"})
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_get_role(client, reader_headers, librarian_headers):
    response = await client.get("/users/librarian@test.com/role", headers=reader_headers)
    assert response.status_code == 200
    assert response.json() == {"role": "librarian"}


@pytest.mark.asyncio
async def test_admin_searches_users(client, admin_headers, make_user):
    await make_user("alice@test.com", UserRole.USER, "Alice")
    await make_user("bob@test.com", UserRole.USER, "Bob")

    response = await client.get("/users", params={"searchText": "ALI"}, headers=admin_headers)
    assert response.status_code == 200
    assert [u["email"] for u in response.json()] == ["alice@test.com"]

    response = await client.get("/users", headers=admin_headers)
    assert len(response.json()) == 3


@pytest.mark.asyncio
async def test_role_change_is_audited(client, admin_headers, make_user, db_session):
    await make_user("carol@test.com", UserRole.USER, "Carol")
    result = await db_session.execute(select(User).where(User.email == "carol@test.com"))
    carol = result.scalar_one()

    response = await client.patch(f"/users/{carol.id}/role", json={"role": "admin"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    logs = await client.get("/admin/audit-logs", params={"action": "ROLE_CHANGED"}, headers=admin_headers)
    assert logs.status_code == 200
    [entry] = logs.json()["logs"]
    assert entry["actorEmail"] == "admin@test.com"
    assert entry["targetId"] == carol.user_id
    assert entry["metaData"] == {"from": "user", "to": "admin"}


@pytest.mark.asyncio
async def test_role_change_rejects_unknown_role(client, admin_headers):
    response = await client.patch("/users/1/role", json={"role": "superuser"}, headers=admin_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_role_change_for_missing_user(client, admin_headers):
    response = await client.patch("/users/9999/role", json={"role": "librarian"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_non_admin_cannot_change_roles(client, reader_headers):
    response = await client.patch("/users/1/role", json={"role": "admin"}, headers=reader_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_concurrent_sign_in_loses_race_quietly(client, db_session, mocker):
    await client.post("/users", json={"name": "Ada", "email": "ada@test.com"})

    # The second request's existence check ran before the first one committed
    mocker.patch("bookcourier.app.api.endpoints.users._find_user", return_value=None)

    response = await client.post("/users", json={"name": "Ada", "email": "ada@test.com"})
    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["message"] == "User already exists"

    result = await db_session.execute(select(User))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_registration_is_audited_once(client, admin_headers):
    await client.post("/users", json={"name": "Ada", "email": "ada@test.com"})
    await client.post("/users", json={"name": "Ada", "email": "ada@test.com"})

    logs = await client.get("/admin/audit-logs", params={"action": "USER_CREATED"}, headers=admin_headers)
    assert [entry["actorEmail"] for entry in logs.json()["logs"]] == ["ada@test.com"]
