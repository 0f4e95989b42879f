"""User data-access layer.

Pure queries without business logic or HTTP concerns. ``find_*`` return the
model or ``None``; callers decide whether a miss is an error. The one
exception is the unique email constraint: a write that loses a race on it
raises ``DomainError.conflict`` instead of a driver error.
"""

from typing import Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userhub.exceptions import DomainError, ErrorDomain
from userhub.models import User

EMAIL_CONSTRAINT = "uq_users_email"


def email_in_use(email: str) -> DomainError:
    return DomainError.conflict(
        f"Email {email} already in use.", ErrorDomain.USER, {"email": email}
    )


def _is_email_clash(exc: IntegrityError) -> bool:
    return EMAIL_CONSTRAINT in str(exc.orig)


class UserRepository(Protocol):
    async def find_by_id(self, user_id: str) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...

    async def find_many(self) -> list[User]: ...

    async def create(self, *, email: str, name: str, password_hash: str) -> User: ...

    async def update(self, user_id: str, changes: dict[str, Any]) -> User | None: ...

    async def delete(self, user_id: str) -> bool: ...


class SqlUserRepository:
    """``UserRepository`` backed by SQLAlchemy; one transaction per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_id(self, user_id: str) -> User | None:
        async with self._session_factory() as db:
            return await db.get(User, user_id)

    async def find_by_email(self, email: str) -> User | None:
        async with self._session_factory() as db:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def find_many(self) -> list[User]:
        async with self._session_factory() as db:
            result = await db.execute(select(User).order_by(User.created_at, User.id))
            return list(result.scalars().all())

    async def create(self, *, email: str, name: str, password_hash: str) -> User:
        try:
            async with self._session_factory() as db, db.begin():
                user = User(email=email, name=name, password_hash=password_hash)
                db.add(user)
                await db.flush()
                await db.refresh(user)
                return user
        except IntegrityError as exc:
            if _is_email_clash(exc):
                raise email_in_use(email) from exc
            raise

    async def update(self, user_id: str, changes: dict[str, Any]) -> User | None:
        try:
            async with self._session_factory() as db, db.begin():
                user = await db.get(User, user_id)
                if user is None:
                    return None
                for field, value in changes.items():
                    setattr(user, field, value)
                await db.flush()
                # updated_at is set server-side
                await db.refresh(user)
                return user
        except IntegrityError as exc:
            if _is_email_clash(exc):
                raise email_in_use(changes["email"]) from exc
            raise

    async def delete(self, user_id: str) -> bool:
        async with self._session_factory() as db, db.begin():
            result = await db.execute(delete(User).where(User.id == user_id))
            return bool(result.rowcount)
