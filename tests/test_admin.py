"""HTTP tests for /api/v1/admin session revocation."""

import pytest
from httpx import AsyncClient

from tests.fakes import InMemorySessionRepository
from tests.seeds import Account

ADMIN = "/api/v1/admin"


@pytest.mark.asyncio
async def test_revoke_all_sessions(
    client: AsyncClient,
    admin: Account,
    member: Account,
    session_repo: InMemorySessionRepository,
) -> None:
    response = await client.post(f"{ADMIN}/revoke-sessions", headers=admin.headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "All sessions revoked successfully"}
    assert session_repo.sessions == {}

    # The caller's own session is gone too.
    again = await client.get("/api/v1/users", headers=admin.headers)
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_revoke_one_users_sessions(
    client: AsyncClient,
    admin: Account,
    member: Account,
    session_repo: InMemorySessionRepository,
) -> None:
    response = await client.post(f"{ADMIN}/revoke-session/{member.user.id}", headers=admin.headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Session revoked successfully"}
    assert [record.user_id for record in session_repo.sessions.values()] == [admin.user.id]

    member_again = await client.get(f"/api/v1/users/{member.user.id}", headers=member.headers)
    assert member_again.status_code == 401
    admin_again = await client.get("/api/v1/users", headers=admin.headers)
    assert admin_again.status_code == 200


@pytest.mark.asyncio
async def test_revoke_unknown_user(client: AsyncClient, admin: Account) -> None:
    response = await client.post(f"{ADMIN}/revoke-session/nobody", headers=admin.headers)

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["type"] == "NOT_FOUND"
    assert error["domain"] == "USER"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/revoke-sessions", "/revoke-session/someone"])
async def test_member_cannot_revoke(
    client: AsyncClient,
    member: Account,
    session_repo: InMemorySessionRepository,
    path: str,
) -> None:
    response = await client.post(f"{ADMIN}{path}", headers=member.headers)

    assert response.status_code == 403
    assert response.json()["error"]["domain"] == "ADMIN"
    assert len(session_repo.sessions) == 1


@pytest.mark.asyncio
async def test_revoke_requires_login(client: AsyncClient) -> None:
    response = await client.post(f"{ADMIN}/revoke-sessions")
    assert response.status_code == 401
