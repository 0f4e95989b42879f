"""Authentication: accounts, passwords and login sessions.

Passwords are hashed with bcrypt. Session tokens are random 256-bit strings
handed to the client once; only HMAC-SHA256(auth_secret, token) is stored,
so a leaked sessions table cannot be replayed. Emails are lowercased before
any lookup or write.

``get_session`` is the session resolver consumed by ``AuthenticationGuard``.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt

from userhub.config import Settings
from userhub.context import Credentials, Role, Session, SessionUser
from userhub.exceptions import DomainError, ErrorDomain, ErrorKind
from userhub.logging import get_logger
from userhub.models import User
from userhub.repositories.session import SessionRepository
from userhub.repositories.user import UserRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenInfo:
    access_token: str
    expires_in: int


@dataclass(frozen=True)
class AuthResult:
    user: SessionUser


@dataclass(frozen=True)
class LoginResult:
    user: SessionUser
    token: TokenInfo


def hash_password(plain: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database.
        return False


def _already_exists(email: str) -> DomainError:
    return DomainError.conflict("User already exists.", ErrorDomain.AUTH, {"email": email})


def session_user(user: User) -> SessionUser:
    return SessionUser(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role or Role.USER,
        email_verified=bool(user.email_verified),
    )


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        settings: Settings,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._secret = settings.auth_secret.encode("utf-8")
        self._ttl = timedelta(seconds=settings.session_expires_in)
        self._rounds = settings.bcrypt_rounds
        self._dummy_hash: str | None = None

    def _timing_hash(self) -> str:
        """Hash checked when the email is unknown, so both failure paths cost one bcrypt check.

        Built on first use, not at construction.
        """
        if self._dummy_hash is None:
            self._dummy_hash = hash_password(secrets.token_hex(8), self._rounds)
        return self._dummy_hash

    def hash_token(self, token: str) -> str:
        return hmac.new(self._secret, token.encode("utf-8"), hashlib.sha256).hexdigest()

    async def sign_up(self, *, email: str, password: str, name: str) -> AuthResult:
        email = email.lower()
        if await self._users.find_by_email(email) is not None:
            raise _already_exists(email)

        try:
            user = await self._users.create(
                email=email, name=name, password_hash=hash_password(password, self._rounds)
            )
        except DomainError as exc:
            # Lost a race with a concurrent signup for the same email.
            if exc.kind is ErrorKind.CONFLICT:
                raise _already_exists(email) from exc
            raise
        logger.info("user_signed_up", user_id=user.id)
        return AuthResult(user=session_user(user))

    async def sign_in(
        self,
        *,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> LoginResult:
        user = await self._users.find_by_email(email.lower())
        hashed = user.password_hash if user else self._timing_hash()
        password_ok = verify_password(password, hashed)
        if user is None or not password_ok:
            raise DomainError.unauthorized("Invalid email or password.", ErrorDomain.AUTH)

        token = secrets.token_urlsafe(32)
        await self._sessions.create(
            user_id=user.id,
            token_hash=self.hash_token(token),
            expires_at=datetime.now(UTC) + self._ttl,
            ip_address=ip_address,
            user_agent=user_agent[:255] if user_agent else None,
        )
        logger.info("session_created", user_id=user.id)

        return LoginResult(
            user=session_user(user),
            token=TokenInfo(access_token=token, expires_in=int(self._ttl.total_seconds())),
        )

    async def get_session(self, credentials: Credentials) -> Session | None:
        """Resolve credentials to a live session, or ``None``."""
        token = credentials.token
        if not token:
            return None

        record = await self._sessions.find_by_token_hash(self.hash_token(token))
        if record is None:
            return None
        if record.expires_at <= datetime.now(UTC):
            await self._sessions.delete_by_token_hash(record.token_hash)
            return None

        user = await self._users.find_by_id(record.user_id)
        if user is None:
            return None

        return Session(token=token, expires_at=record.expires_at, user=session_user(user))

    async def sign_out(self, token: str) -> None:
        await self._sessions.delete_by_token_hash(self.hash_token(token))

    async def revoke_user_sessions(self, user_id: str) -> int:
        if await self._users.find_by_id(user_id) is None:
            raise DomainError.not_found(
                f"User with ID {user_id} not found.", ErrorDomain.USER, {"userId": user_id}
            )
        revoked = await self._sessions.delete_for_user(user_id)
        logger.info("sessions_revoked", user_id=user_id, count=revoked)
        return revoked

    async def revoke_all_sessions(self) -> int:
        revoked = await self._sessions.delete_all()
        logger.info("sessions_revoked", scope="all", count=revoked)
        return revoked
