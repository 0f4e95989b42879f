"""HTTP tests for /api/v1/auth."""

import pytest
from httpx import AsyncClient

from userhub.config import Settings
from tests.factories import DEFAULT_PASSWORD
from tests.fakes import InMemorySessionRepository, InMemoryUserRepository
from tests.seeds import Account

AUTH = "/api/v1/auth"


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_signup(client: AsyncClient, user_repo: InMemoryUserRepository) -> None:
    response = await client.post(
        f"{AUTH}/signup",
        json={"email": "new@example.com", "password": "hunter22", "name": "New Person"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Signup successful"
    user = body["data"]["user"]
    assert user["email"] == "new@example.com"
    assert user["name"] == "New Person"
    assert user["role"] == "USER"
    assert user["emailVerified"] is False

    stored = user_repo.users[user["id"]]
    assert stored.password_hash != "hunter22"
    assert stored.password_hash.startswith("$2")


@pytest.mark.asyncio
async def test_signup_missing_name(client: AsyncClient) -> None:
    response = await client.post(
        f"{AUTH}/signup", json={"email": "new@example.com", "password": "hunter22"}
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["type"] == "VALIDATION"
    assert error["details"]["validationErrors"][0]["path"] == "name"


@pytest.mark.asyncio
async def test_signup_short_password(client: AsyncClient) -> None:
    response = await client.post(
        f"{AUTH}/signup", json={"email": "new@example.com", "password": "abc", "name": "New"}
    )

    assert response.status_code == 400
    paths = [e["path"] for e in response.json()["error"]["details"]["validationErrors"]]
    assert paths == ["password"]


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["x" * 73, "é" * 37])
async def test_signup_password_over_bcrypt_limit(client: AsyncClient, password: str) -> None:
    response = await client.post(
        f"{AUTH}/signup",
        json={"email": "new@example.com", "password": password, "name": "New Person"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["type"] == "VALIDATION"
    assert [e["path"] for e in error["details"]["validationErrors"]] == ["password"]


@pytest.mark.asyncio
async def test_signup_password_at_bcrypt_limit(client: AsyncClient) -> None:
    response = await client.post(
        f"{AUTH}/signup",
        json={"email": "new@example.com", "password": "x" * 72, "name": "New Person"},
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_signup_email_is_stored_lowercase(
    client: AsyncClient, user_repo: InMemoryUserRepository
) -> None:
    response = await client.post(
        f"{AUTH}/signup",
        json={"email": "New.Person@Example.com", "password": "hunter22", "name": "New Person"},
    )

    assert response.status_code == 201
    assert response.json()["data"]["user"]["email"] == "new.person@example.com"


@pytest.mark.asyncio
async def test_signup_existing_email_in_other_case(client: AsyncClient, member: Account) -> None:
    response = await client.post(
        f"{AUTH}/signup",
        json={"email": "Member@example.com", "password": "hunter22", "name": "Copycat"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["message"] == "User already exists."


@pytest.mark.asyncio
async def test_signup_existing_email(client: AsyncClient, member: Account) -> None:
    response = await client.post(
        f"{AUTH}/signup",
        json={"email": "member@example.com", "password": "hunter22", "name": "Copycat"},
    )

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["type"] == "CONFLICT"
    assert error["domain"] == "AUTH"
    assert error["message"] == "User already exists."


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_login(
    client: AsyncClient,
    member: Account,
    session_repo: InMemorySessionRepository,
    settings: Settings,
) -> None:
    response = await client.post(
        f"{AUTH}/login", json={"email": "member@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["id"] == member.user.id
    token = body["data"]["token"]
    assert token["expiresIn"] == settings.session_expires_in
    assert token["accessToken"]

    assert response.cookies.get(settings.session_cookie_name) == token["accessToken"]
    assert "httponly" in response.headers["set-cookie"].lower()
    # member fixture session plus the new one
    assert len(session_repo.sessions) == 2
    assert token["accessToken"] not in session_repo.sessions


@pytest.mark.asyncio
async def test_login_token_authenticates(client: AsyncClient, member: Account) -> None:
    login = await client.post(
        f"{AUTH}/login", json={"email": "member@example.com", "password": DEFAULT_PASSWORD}
    )
    token = login.json()["data"]["token"]["accessToken"]

    response = await client.get(
        f"/api/v1/users/{member.user.id}", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_ignores_email_case(client: AsyncClient, member: Account) -> None:
    response = await client.post(
        f"{AUTH}/login", json={"email": "MEMBER@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == member.user.id


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, member: Account) -> None:
    response = await client.post(
        f"{AUTH}/login", json={"email": "member@example.com", "password": "wrong-password"}
    )

    assert response.status_code == 401
    error = response.json()["error"]
    assert error["domain"] == "AUTH"
    assert error["message"] == "Invalid email or password."


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient) -> None:
    response = await client.post(
        f"{AUTH}/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid email or password."


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_cookie_credentials(client: AsyncClient, member: Account, settings: Settings) -> None:
    response = await client.get(
        f"/api/v1/users/{member.user.id}",
        headers={"Cookie": f"{settings.session_cookie_name}={member.token}"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_bearer_wins_over_cookie(
    client: AsyncClient, member: Account, settings: Settings
) -> None:
    response = await client.get(
        f"/api/v1/users/{member.user.id}",
        headers={
            "Authorization": "Bearer revoked-token",
            "Cookie": f"{settings.session_cookie_name}={member.token}",
        },
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_resolved_once_per_request(
    client: AsyncClient, admin: Account, session_repo: InMemorySessionRepository
) -> None:
    # /users runs both the authentication and the admin guard.
    response = await client.get("/api/v1/users", headers=admin.headers)

    assert response.status_code == 200
    assert session_repo.lookups == 1


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_logout_revokes_session(
    client: AsyncClient, member: Account, session_repo: InMemorySessionRepository
) -> None:
    response = await client.post(f"{AUTH}/logout", headers=member.headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Signout successful"}
    assert session_repo.sessions == {}

    again = await client.get(f"/api/v1/users/{member.user.id}", headers=member.headers)
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_logout_requires_login(client: AsyncClient) -> None:
    response = await client.post(f"{AUTH}/logout")
    assert response.status_code == 401
