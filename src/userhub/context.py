"""Request-scoped values threaded through guards and handlers.

A ``RequestContext`` is built once per request and never mutated: a guard
that resolves the session returns a new context with it attached, and every
later guard or handler reads that value instead of going back to the
headers. That is what keeps session resolution to at most one round trip
per request.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum


class Role(StrEnum):
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass(frozen=True, slots=True)
class Credentials:
    """Raw credentials presented by the client."""

    bearer_token: str | None = None
    cookie_token: str | None = None

    @property
    def token(self) -> str | None:
        # Bearer wins: API clients may still carry a stale browser cookie.
        return self.bearer_token or self.cookie_token


@dataclass(frozen=True, slots=True)
class SessionUser:
    id: str
    email: str
    name: str
    role: str | None
    email_verified: bool


@dataclass(frozen=True, slots=True)
class Session:
    """An authenticated session as handed out by the session resolver."""

    token: str
    expires_at: datetime
    user: SessionUser | None


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str | None
    method: str
    url: str
    credentials: Credentials = Credentials()
    session: Session | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.session.user is not None

    def with_session(self, session: Session) -> "RequestContext":
        return replace(self, session=session)
