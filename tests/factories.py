"""Factory functions for creating model instances in tests."""

import uuid
from datetime import UTC, datetime, timedelta

from userhub.context import Credentials, RequestContext, Role, Session, SessionUser
from userhub.models import AuthSession, User

# Password the seeded users sign in with
DEFAULT_PASSWORD = "secret-password"


def make_user(
    *,
    user_id: str | None = None,
    email: str | None = None,
    name: str = "Ada Lovelace",
    role: str = Role.USER,
    email_verified: bool = False,
    password_hash: str = "",
) -> User:
    user_id = user_id or str(uuid.uuid4())
    now = datetime.now(UTC)
    return User(
        id=user_id,
        email=email or f"user-{user_id[:8]}@example.com",
        name=name,
        role=role,
        email_verified=email_verified,
        password_hash=password_hash,
        created_at=now,
        updated_at=now,
    )


def make_admin(*, email: str | None = None, password_hash: str = "") -> User:
    return make_user(role=Role.ADMIN, name="Grace Hopper", email=email, password_hash=password_hash)


def make_auth_session(
    *,
    user_id: str,
    token_hash: str,
    expires_at: datetime | None = None,
) -> AuthSession:
    return AuthSession(
        id=str(uuid.uuid4()),
        user_id=user_id,
        token_hash=token_hash,
        expires_at=expires_at or datetime.now(UTC) + timedelta(days=7),
        created_at=datetime.now(UTC),
    )


def make_session(*, role: str | None = Role.USER, user_id: str = "user-1") -> Session:
    return Session(
        token="token-abc",
        expires_at=datetime.now(UTC) + timedelta(days=1),
        user=SessionUser(
            id=user_id,
            email=f"{user_id}@example.com",
            name="Test User",
            role=role,
            email_verified=True,
        ),
    )


def make_context(
    *,
    session: Session | None = None,
    bearer_token: str | None = "token-abc",
    request_id: str = "req-123",
) -> RequestContext:
    return RequestContext(
        request_id=request_id,
        method="GET",
        url="http://test/api/v1/users",
        credentials=Credentials(bearer_token=bearer_token),
        session=session,
    )
