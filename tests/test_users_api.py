"""User management API tests.

Learn: /users is admin-only. The tests focus on the self-protection
rules and on what happens to todos when their creator or assignee is
deleted.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from taskboard.db.models import Role, Todo, User
from taskboard.services.user_service import UserService


@pytest.mark.asyncio
async def test_list_users(client, admin, member, admin_headers):
    r = await client.get("/api/users", headers=admin_headers)
    assert r.status_code == 200
    users = r.json()
    assert [u["email"] for u in users] == [admin.email, member.email]
    assert all("passwordHash" not in u and "refreshToken" not in u for u in users)


@pytest.mark.asyncio
async def test_member_cannot_list_users(client, member_headers):
    r = await client.get("/api/users", headers=member_headers)
    assert r.status_code == 403
    assert r.json()["error"] == "Access denied. Administrators only."


@pytest.mark.asyncio
async def test_get_user(client, member, admin_headers):
    r = await client.get(f"/api/users/{member.id}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Bob"

    r = await client.get("/api/users/999", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "User not found"


@pytest.mark.asyncio
async def test_change_role(client, member, admin_headers):
    r = await client.patch(
        f"/api/users/{member.id}", json={"role": "ADMIN"}, headers=admin_headers
    )
    assert r.status_code == 200
    assert r.json()["role"] == "ADMIN"

    r = await client.patch(
        f"/api/users/{member.id}", json={"role": "USER"}, headers=admin_headers
    )
    assert r.json()["role"] == "USER"


@pytest.mark.asyncio
async def test_change_role_invalid_value(client, member, admin_headers):
    r = await client.patch(
        f"/api/users/{member.id}", json={"role": "OWNER"}, headers=admin_headers
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_cannot_change_own_role(client, admin, admin_headers):
    r = await client.patch(
        f"/api/users/{admin.id}", json={"role": "USER"}, headers=admin_headers
    )
    assert r.status_code == 403
    assert r.json()["error"] == "You cannot change your own role"


@pytest.mark.asyncio
async def test_cannot_delete_self(client, admin, admin_headers):
    r = await client.delete(f"/api/users/{admin.id}", headers=admin_headers)
    assert r.status_code == 403
    assert r.json()["error"] == "You cannot delete your own account"


@pytest.mark.asyncio
async def test_cannot_delete_last_admin(client, admin, make_user, auth_headers):
    """An admin demoted after their token was issued still can't remove the last admin.

    Setup: A and B are admins. B demotes A. A's token still says ADMIN,
    so A gets past the role gate and tries to delete B, now the only admin.
    """
    other = await make_user(Role.ADMIN, email="carol@example.com", name="Carol")
    stale_headers = auth_headers(admin)

    r = await client.patch(
        f"/api/users/{admin.id}", json={"role": "USER"}, headers=auth_headers(other)
    )
    assert r.status_code == 200

    r = await client.delete(f"/api/users/{other.id}", headers=stale_headers)
    assert r.status_code == 403
    assert r.json()["error"] == "Cannot delete the last administrator"

    r = await client.get(f"/api/users/{other.id}", headers=auth_headers(other))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_delete_admin_when_another_remains(client, make_user, admin_headers):
    other = await make_user(Role.ADMIN, email="carol@example.com", name="Carol")
    r = await client.delete(f"/api/users/{other.id}", headers=admin_headers)
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_delete_user_cleans_up_todos(
    client, database, make_user, member, admin_headers, auth_headers
):
    """Assigned todos are unassigned, created todos are removed."""
    creator = await make_user(Role.ADMIN, email="carol@example.com", name="Carol")
    creator_headers = auth_headers(creator)

    r = await client.post(
        "/api/todos", json={"title": "Made by Carol"}, headers=creator_headers
    )
    created_id = r.json()["id"]
    r = await client.post(
        "/api/todos",
        json={"title": "For Carol", "assignedToId": creator.id},
        headers=admin_headers,
    )
    assigned_id = r.json()["id"]
    r = await client.post(
        "/api/todos",
        json={"title": "For Bob", "assignedToId": member.id},
        headers=admin_headers,
    )
    untouched_id = r.json()["id"]

    r = await client.delete(f"/api/users/{creator.id}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "User deleted"

    r = await client.get(f"/api/todos/{created_id}", headers=admin_headers)
    assert r.status_code == 404
    r = await client.get(f"/api/todos/{assigned_id}", headers=admin_headers)
    assert r.json()["assignedToId"] is None
    r = await client.get(f"/api/todos/{untouched_id}", headers=admin_headers)
    assert r.json()["assignedToId"] == member.id

    async with database.session_factory() as session:
        assert await session.get(User, creator.id) is None
        titles = (await session.execute(select(Todo.title))).scalars().all()
        assert sorted(titles) == ["For Bob", "For Carol"]


@pytest.mark.asyncio
async def test_delete_missing_user(client, admin_headers):
    r = await client.delete("/api/users/999", headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_member_cannot_delete_users(client, admin, member_headers):
    r = await client.delete(f"/api/users/{admin.id}", headers=member_headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_cannot_demote_last_admin(client, admin, make_user, auth_headers):
    """A stale ADMIN token can't demote the only remaining admin either."""
    other = await make_user(Role.ADMIN, email="carol@example.com", name="Carol")
    stale_headers = auth_headers(admin)

    r = await client.patch(
        f"/api/users/{admin.id}", json={"role": "USER"}, headers=auth_headers(other)
    )
    assert r.status_code == 200

    r = await client.patch(
        f"/api/users/{other.id}", json={"role": "USER"}, headers=stale_headers
    )
    assert r.status_code == 403
    assert r.json()["error"] == "Cannot demote the last administrator"


class _RecordingSession:
    """Just enough of AsyncSession to capture what count_admins executes."""

    def __init__(self):
        self.statements = []

    async def execute(self, statement):
        self.statements.append(statement)
        return SimpleNamespace(all=lambda: [(1,), (2,)])


@pytest.mark.asyncio
async def test_admin_count_locks_admin_rows():
    """The last-admin check holds row locks until its transaction commits."""
    session = _RecordingSession()
    assert await UserService(session).count_admins() == 2

    (statement,) = session.statements
    sql = str(statement.compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" in sql
    assert "WHERE users.role" in sql
