"""Login-session data-access layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userhub.models import AuthSession


class SessionRepository(Protocol):
    async def create(
        self,
        *,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthSession: ...

    async def find_by_token_hash(self, token_hash: str) -> AuthSession | None: ...

    async def delete_by_token_hash(self, token_hash: str) -> bool: ...

    async def delete_for_user(self, user_id: str) -> int: ...

    async def delete_all(self) -> int: ...


class SqlSessionRepository:
    """``SessionRepository`` backed by SQLAlchemy; one transaction per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(
        self,
        *,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthSession:
        async with self._session_factory() as db, db.begin():
            record = AuthSession(
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            db.add(record)
            await db.flush()
            await db.refresh(record)
            return record

    async def find_by_token_hash(self, token_hash: str) -> AuthSession | None:
        async with self._session_factory() as db:
            stmt = select(AuthSession).where(AuthSession.token_hash == token_hash)
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def delete_by_token_hash(self, token_hash: str) -> bool:
        async with self._session_factory() as db, db.begin():
            stmt = delete(AuthSession).where(AuthSession.token_hash == token_hash)
            result = await db.execute(stmt)
            return bool(result.rowcount)

    async def delete_for_user(self, user_id: str) -> int:
        async with self._session_factory() as db, db.begin():
            result = await db.execute(delete(AuthSession).where(AuthSession.user_id == user_id))
            return result.rowcount

    async def delete_all(self) -> int:
        async with self._session_factory() as db, db.begin():
            result = await db.execute(delete(AuthSession))
            return result.rowcount
