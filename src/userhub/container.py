"""Application object graph.

Everything is built once at startup and handed to the router factories, so
each route's collaborators are visible where the route is registered. Tests
build their own container around in-memory repositories.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userhub.config import Settings
from userhub.guards import AdminGuard, AuthenticationGuard
from userhub.repositories.session import SessionRepository, SqlSessionRepository
from userhub.repositories.user import SqlUserRepository, UserRepository
from userhub.services.auth import AuthService
from userhub.services.user import UserService


@dataclass(frozen=True, slots=True)
class Container:
    settings: Settings
    user_service: UserService
    auth_service: AuthService
    authenticate: AuthenticationGuard
    require_admin: AdminGuard


def build_container(
    settings: Settings,
    *,
    users: UserRepository,
    sessions: SessionRepository,
) -> Container:
    auth_service = AuthService(users, sessions, settings)
    return Container(
        settings=settings,
        user_service=UserService(users),
        auth_service=auth_service,
        authenticate=AuthenticationGuard(auth_service.get_session),
        require_admin=AdminGuard(),
    )


def build_sql_container(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> Container:
    """Production wiring: SQLAlchemy repositories over ``session_factory``."""
    return build_container(
        settings,
        users=SqlUserRepository(session_factory),
        sessions=SqlSessionRepository(session_factory),
    )
